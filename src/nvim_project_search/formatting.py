"""Display helpers for search results.

Provides:
- wrap_text(): Break a name into lines of bounded width at whitespace
- filter_results(): Truncate a result list
- build_metas(): Resolve result ids into display metadata
"""

from __future__ import annotations

import functools
import logging
import re
from typing import TYPE_CHECKING

from typing_extensions import TypedDict

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .index.store import ProjectIndex

logger = logging.getLogger(__name__)


class ResultMeta(TypedDict):
    """Display metadata for one project result."""

    id: str
    name: str
    path: str


@functools.lru_cache(maxsize=32)
def _wrap_pattern(width: int) -> re.Pattern[str]:
    # Longest run of up to `width` characters followed by whitespace,
    # unless the rest of the text already fits on one line.
    return re.compile(rf"(?![^\n]{{1,{width}}}\Z)([^\n]{{1,{width}}})\s")


def wrap_text(text: str, width: int) -> str:
    """
    Wrap text at whitespace so lines stay within width where possible.

    Only whitespace characters are replaced by newlines, so words are
    never split; a word longer than width stays on its own line.
    Re-wrapping already wrapped text with the same width is a no-op.

    Args:
        text: Text to wrap
        width: Maximum line width in characters

    Returns:
        Wrapped text

    Example:
        >>> wrap_text("my very long project", 10)
        'my very\\nlong\\nproject'
    """
    if width < 1:
        raise ValueError("width must be >= 1")
    return _wrap_pattern(width).sub(r"\1\n", text)


def filter_results(results: list[str], max_results: int) -> list[str]:
    """Return the first max_results ids, preserving order."""
    return results[: max(max_results, 0)]


def build_metas(
    index: ProjectIndex, ids: Iterable[str], width: int
) -> list[ResultMeta]:
    """
    Build display metadata for result ids.

    Unknown ids are logged and left out of the output.

    Args:
        index: Project index to resolve ids against
        ids: Result ids (project names)
        width: Wrap width for display names

    Returns:
        Metadata for each known id, in the order given
    """
    metas: list[ResultMeta] = []
    for result_id in ids:
        project = index.lookup(result_id)
        if project is None:
            logger.warning("Failed to find project with id: %s", result_id)
            continue
        metas.append(
            ResultMeta(
                id=result_id,
                name=wrap_text(project.name, width),
                path=project.path,
            )
        )
    return metas
