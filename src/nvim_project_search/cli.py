"""Command-line interface for nvim-project-search.

Provides commands for:
- serve: Run the MCP server (default)
- list: Show every project under the root
- search: Show projects matching all terms
- open: Open a project in Neovim

Usage:
    nvim-project-search              # Run MCP server (default)
    nvim-project-search serve        # Run MCP server explicitly
    nvim-project-search list         # List projects
    nvim-project-search search api   # Search projects
    nvim-project-search open api     # Open a project
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, TypeVar

import cyclopts

from .config import get_root

if TYPE_CHECKING:
    from .provider import SearchProvider

T = TypeVar("T")

app = cyclopts.App(
    name="nvim-project-search",
    help="Search the projects in your dev directory and open them in Neovim.",
)

RootOption = Annotated[
    Path | None,
    cyclopts.Parameter(
        name=["--root", "-r"],
        help="Projects root (defaults to NVIM_PROJECTS_ROOT or ~/dev)",
    ),
]
VerboseOption = Annotated[
    bool,
    cyclopts.Parameter(
        name=["--verbose", "-v"],
        help="Enable verbose output",
    ),
]


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr (stdout carries the MCP protocol)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _make_provider(root: Path | None) -> "SearchProvider":
    from .provider import SearchProvider

    return SearchProvider(root or get_root())


def _run_once(
    root: Path | None, action: Callable[["SearchProvider"], Awaitable[T]]
) -> T:
    """Scan the root once, run action(provider), and stop watching."""
    from .index import WatcherError

    async def runner() -> T:
        async with _make_provider(root) as provider:
            await provider.wait_ready()
            if provider.watcher.scan_error is not None:
                print(
                    f"Warning: scan incomplete: {provider.watcher.scan_error}",
                    file=sys.stderr,
                )
            return await action(provider)

    try:
        return asyncio.run(runner())
    except WatcherError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)


def _run_serve(root: Path | None) -> None:
    """Internal function to run the MCP server."""
    from .server import create_server

    mcp = create_server(_make_provider(root))
    mcp.run()


@app.command
def serve(root: RootOption = None, verbose: VerboseOption = False) -> None:
    """
    Run the MCP server.

    This is the default command when no subcommand is specified.
    The project index is built from a scan of the root at startup and
    kept current by watching the root for changes.
    """
    _configure_logging(verbose)
    _run_serve(root)


@app.command(name="list")
def list_projects(
    root: RootOption = None, verbose: VerboseOption = False
) -> None:
    """
    List every project under the root.

    Prints one project per line as NAME<TAB>PATH.
    """
    _configure_logging(verbose)

    async def action(provider):
        return provider.index.projects()

    projects = _run_once(root, action)
    for project in sorted(projects, key=lambda p: p.name):
        print(f"{project.name}\t{project.path}")


@app.command
def search(
    *terms: str,
    max_results: Annotated[
        int | None,
        cyclopts.Parameter(
            name=["--max", "-n"],
            help="Maximum number of results",
        ),
    ] = None,
    root: RootOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Search projects whose name matches every term.

    Terms are case-insensitive and may be regular expressions.
    Exits with status 1 when nothing matches.
    """
    _configure_logging(verbose)

    async def action(provider):
        ids = provider.get_initial_result_set(terms)
        if max_results is not None:
            ids = provider.filter_results(ids, max_results)
        return provider.get_result_metas(ids)

    metas = _run_once(root, action)
    if not metas:
        print("No matching projects.", file=sys.stderr)
        sys.exit(1)
    for meta in metas:
        print(f"{meta['id']}\t{meta['path']}")


@app.command(name="open")
def open_project(
    name: str, root: RootOption = None, verbose: VerboseOption = False
) -> None:
    """
    Open a project in Neovim.

    The command line comes from NVIM_PROJECTS_COMMAND.
    """
    from .launcher import LaunchError

    _configure_logging(verbose)

    async def action(provider):
        return await provider.activate_result(name)

    try:
        request = _run_once(root, action)
    except LaunchError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)

    if request is None:
        print(f"✗ No project named {name!r}", file=sys.stderr)
        sys.exit(1)
    print(f"✓ Opened {request.path}")


@app.default
def default_handler(
    root: RootOption = None, verbose: VerboseOption = False
) -> None:
    """Run the MCP server (default when no command specified)."""
    _configure_logging(verbose)
    _run_serve(root)


def main() -> None:
    """Entry point for the CLI."""
    app()
