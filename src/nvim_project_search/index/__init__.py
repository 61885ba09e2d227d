"""Live index of project directories.

This module provides:
- ProjectIndex: Path-keyed collection of projects with name lookup
- DirectoryWatcher: Subscription plus initial listing as one event stream
- match_projects(): Case-insensitive multi-term name matching
"""

from .search import match_projects, split_query
from .store import Project, ProjectIndex
from .watcher import DirectoryWatcher, EventKind, WatcherError, WatchEvent

__all__ = [
    "DirectoryWatcher",
    "EventKind",
    "Project",
    "ProjectIndex",
    "WatchEvent",
    "WatcherError",
    "match_projects",
    "split_query",
]
