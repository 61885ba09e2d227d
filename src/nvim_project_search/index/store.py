"""In-memory project index.

Projects are keyed by absolute path (the identity) and looked up by name
(the identifier handed to search hosts). A secondary name -> path map keeps
lookups O(1); both maps are updated together inside each method, and every
method is synchronous, so readers on the event loop never observe a
half-applied update.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .watcher import EventKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .watcher import WatchEvent

logger = logging.getLogger(__name__)

UPSERT_KINDS = frozenset(
    {EventKind.CREATED, EventKind.CHANGED, EventKind.CHANGES_DONE_HINT}
)


@dataclass(frozen=True)
class Project:
    """An indexed directory: identified by path, displayed by name."""

    name: str
    path: str


class ProjectIndex:
    """
    Live collection of projects, at most one per path.

    Iteration follows upsert order: re-upserting a path moves it to the
    end, the same as deleting and appending it.
    """

    def __init__(self) -> None:
        self._by_path: dict[str, Project] = {}
        self._by_name: dict[str, str] = {}  # name -> path, last write wins

    def __len__(self) -> int:
        return len(self._by_path)

    def __iter__(self) -> Iterator[Project]:
        return iter(list(self._by_path.values()))

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def projects(self) -> list[Project]:
        """Snapshot of all projects in index order."""
        return list(self._by_path.values())

    def get(self, path: str) -> Project | None:
        """Get the project stored at path, if any."""
        return self._by_path.get(path)

    def upsert(self, path: str, name: str) -> Project:
        """
        Insert or replace the project at path.

        Any existing entry for the path is dropped first, so a rename
        reported against the same path replaces the old name.

        Args:
            path: Absolute directory path (identity key)
            name: Directory base name

        Returns:
            The stored Project
        """
        self._drop(path)
        project = Project(name=name, path=path)
        self._by_path[path] = project
        self._by_name[name] = path
        logger.debug("Indexed %s -> %s", name, path)
        return project

    def remove(self, path: str) -> bool:
        """
        Remove the project at path.

        Returns:
            True if an entry was removed, False if the path was not indexed
        """
        removed = self._drop(path)
        if removed:
            logger.debug("Removed %s", path)
        return removed

    def lookup(self, name: str) -> Project | None:
        """
        Find a project by name.

        Returns:
            The most recently upserted project with that name, or None
        """
        path = self._by_name.get(name)
        if path is None:
            return None
        return self._by_path.get(path)

    def apply(self, event: WatchEvent) -> None:
        """Apply one watcher event to the index."""
        if event.kind in UPSERT_KINDS:
            name = os.path.basename(event.path.rstrip(os.sep))
            if name:
                self.upsert(event.path, name)
        elif event.kind is EventKind.DELETED:
            self.remove(event.path)

    def clear(self) -> None:
        """Drop every entry."""
        self._by_path.clear()
        self._by_name.clear()

    def _drop(self, path: str) -> bool:
        old = self._by_path.pop(path, None)
        if old is None:
            return False

        if self._by_name.get(old.name) == path:
            del self._by_name[old.name]
            # Another path may still carry the same name
            for other in reversed(self._by_path.values()):
                if other.name == old.name:
                    self._by_name[old.name] = other.path
                    break
        return True
