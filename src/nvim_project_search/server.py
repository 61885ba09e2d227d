"""
Neovim Project Search MCP Server

Exposes the live project index to MCP clients. The server lifespan starts
the SearchProvider (watch + initial scan) and stops it on shutdown.

TOOLS (4 total):
- search_projects(query, max_results?) - Find projects matching all terms
- refine_search(previous_ids, query) - Narrow an earlier search
- get_project_metas(ids) - Display metadata for result ids
- open_project(project_id) - Open a project in the editor
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from typing_extensions import TypedDict

from fastmcp import FastMCP

from .formatting import ResultMeta
from .index import split_query
from .provider import SearchProvider

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


# ========== Response Type Definitions ==========


class OpenResult(TypedDict):
    """Outcome of an open_project call."""

    launched: bool
    id: str
    path: str | None
    title: str | None


# ========== Server Factory ==========


def create_server(provider: SearchProvider | None = None) -> FastMCP:
    """
    Create the MCP server around a SearchProvider.

    Args:
        provider: Provider to serve (built from environment config if None)

    Returns:
        FastMCP server whose lifespan owns the provider
    """
    provider = provider or SearchProvider.from_config()

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[SearchProvider]:
        async with provider:
            yield provider

    mcp = FastMCP("Neovim Projects", lifespan=lifespan)

    @mcp.tool
    async def search_projects(
        query: str, max_results: int | None = None
    ) -> list[ResultMeta]:
        """
        Find projects whose name matches every whitespace-separated term.

        Matching is case-insensitive; each term may be a regular
        expression. An empty query lists every project.

        Args:
            query: Search terms, e.g. "api v2"
            max_results: Maximum number of results (all if not specified)

        Returns:
            List of project dicts with 'id', 'name' (wrapped for display)
            and 'path' fields.
        """
        ids = provider.get_initial_result_set(split_query(query))
        if max_results is not None:
            ids = provider.filter_results(ids, max_results)
        return provider.get_result_metas(ids)

    @mcp.tool
    async def refine_search(previous_ids: list[str], query: str) -> list[str]:
        """
        Narrow an earlier search with a longer query.

        The search is re-run against the current index, so projects
        created or removed since the earlier search are reflected.

        Args:
            previous_ids: Ids returned by the earlier search
            query: The full, extended query

        Returns:
            Matching project ids.
        """
        return provider.get_subsearch_result_set(
            previous_ids, split_query(query)
        )

    @mcp.tool
    async def get_project_metas(ids: list[str]) -> list[ResultMeta]:
        """
        Get display metadata for project ids.

        Unknown ids are skipped.

        Args:
            ids: Project ids (directory names)

        Returns:
            List of project dicts with 'id', 'name' and 'path' fields.
        """
        return provider.get_result_metas(ids)

    @mcp.tool
    async def open_project(project_id: str) -> OpenResult:
        """
        Open a project in Neovim inside a new terminal window.

        Args:
            project_id: Project id (directory name)

        Returns:
            Dict with 'launched' flag, plus 'path' and 'title' when found.
        """
        request = await provider.activate_result(project_id)
        if request is None:
            return OpenResult(
                launched=False, id=project_id, path=None, title=None
            )
        return OpenResult(
            launched=True,
            id=project_id,
            path=request.path,
            title=request.title,
        )

    return mcp
