"""Directory watcher for live project index updates.

Watches the projects root (non-recursively) and turns both the initial
listing and subsequent filesystem notifications into one ordered stream
of WatchEvent objects.

Uses watchfiles (Rust-based, efficient) for the live subscription:
- New directories -> created
- Modified entries -> changed
- Removed entries -> deleted

The subscription is established before the initial listing starts, so
nothing created while listing is missed. Pre-existing children are
replayed as synthetic "created" events through the same dispatch path as
live ones.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
from contextlib import aclosing
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, awatch

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

logger = logging.getLogger(__name__)

# Within a debounced batch deletes go first: delete+recreate ends present,
# create+delete ends absent (the create fails the directory check).
_BATCH_ORDER = {Change.deleted: 0, Change.added: 1, Change.modified: 1}


class WatcherError(Exception):
    """Raised when the filesystem subscription cannot be established."""

    def __init__(self, message: str, root: Path | None = None):
        super().__init__(message)
        self.root = root


class EventKind(enum.Enum):
    """Kind of filesystem change."""

    CREATED = "created"
    CHANGED = "changed"
    CHANGES_DONE_HINT = "changes_done_hint"
    DELETED = "deleted"


_CHANGE_KINDS = {
    Change.added: EventKind.CREATED,
    Change.modified: EventKind.CHANGED,
    Change.deleted: EventKind.DELETED,
}


@dataclass(frozen=True)
class WatchEvent:
    """A change notification for one child of the root."""

    path: str
    kind: EventKind


def _read_page(entries: Iterable[os.DirEntry], size: int) -> list[str]:
    """Read up to size entry names from a scandir iterator (blocking)."""
    page = []
    for entry in entries:
        page.append(entry.name)
        if len(page) >= size:
            break
    return page


async def iter_pages(root: Path, page_size: int) -> AsyncIterator[list[str]]:
    """
    List the names of root's children in pages.

    Each page is read in a worker thread so a slow filesystem never
    blocks the event loop.

    Args:
        root: Directory to list
        page_size: Maximum names per page

    Yields:
        Non-empty lists of entry names until the directory is exhausted

    Raises:
        OSError: If the directory cannot be opened or read
    """
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    entries = await asyncio.to_thread(os.scandir, root)
    with entries:
        while True:
            page = await asyncio.to_thread(_read_page, entries, page_size)
            if not page:
                return
            yield page


def translate_changes(
    changes: Iterable[tuple[Change, str]], root: Path
) -> list[WatchEvent]:
    """
    Convert a watchfiles batch into ordered events for root's children.

    Paths outside the root, or nested deeper than one level, are dropped.

    Returns:
        Events with deletions first, then creations and modifications
    """
    events = []
    root_str = str(root)
    for change, path_str in sorted(
        changes, key=lambda c: (_BATCH_ORDER.get(c[0], 1), c[1])
    ):
        kind = _CHANGE_KINDS.get(change)
        if kind is None:
            continue
        if os.path.dirname(path_str.rstrip(os.sep)) != root_str:
            logger.warning("Ignoring path outside projects root: %s", path_str)
            continue
        events.append(WatchEvent(path=path_str, kind=kind))
    return events


class DirectoryWatcher:
    """
    Watches a root directory and streams child directory events.

    Usage:
        watcher = DirectoryWatcher(root)
        await watcher.start()
        async for event in watcher.events():
            ...
        # ... elsewhere ...
        await watcher.stop()
    """

    def __init__(
        self,
        root: Path,
        page_size: int = 100,
        debounce_ms: int = 200,
    ):
        """
        Initialize the watcher.

        Args:
            root: Directory whose immediate children are watched
            page_size: Entries per page during the initial listing
            debounce_ms: Milliseconds to batch notifications for
        """
        self.root = Path(root).expanduser().resolve()
        self.page_size = page_size
        self.debounce_ms = debounce_ms

        self.scanned = asyncio.Event()
        self.scan_error: OSError | None = None

        self._queue: asyncio.Queue[WatchEvent | None] = asyncio.Queue()
        self._stop_event = asyncio.Event()
        self._live_task: asyncio.Task | None = None
        self._scan_task: asyncio.Task | None = None
        self._closed = False

    @property
    def is_running(self) -> bool:
        """Check if the live subscription is active."""
        return self._live_task is not None and not self._live_task.done()

    async def start(self) -> None:
        """
        Subscribe to changes, then start the initial listing.

        Raises:
            WatcherError: If the root cannot be watched
            RuntimeError: If the watcher was already started
        """
        if self._live_task is not None or self._closed:
            raise RuntimeError("DirectoryWatcher can only be started once")

        if not self.root.is_dir():
            self._closed = True
            raise WatcherError(
                f"Projects root is not a directory: {self.root}", self.root
            )

        self._live_task = asyncio.create_task(
            self._watch_loop(), name="DirectoryWatcher.live"
        )
        # Let the task run up to its first suspension, which is after
        # watchfiles has created the OS-level watch.
        await asyncio.sleep(0)
        if self._live_task.done():
            self._closed = True
            exc = self._live_task.exception()
            if exc is not None:
                raise WatcherError(
                    f"Cannot watch {self.root}: {exc}", self.root
                ) from exc
            raise WatcherError(f"Watch on {self.root} ended early", self.root)

        self._scan_task = asyncio.create_task(
            self._scan(), name="DirectoryWatcher.scan"
        )
        logger.info("Directory watcher started for %s", self.root)

    async def stop(self) -> None:
        """Release the subscription and end the event stream."""
        if self._closed and self._live_task is None:
            return
        self._closed = True
        self._stop_event.set()

        # A pending page is allowed to finish; its entries are discarded.
        tasks = [
            t for t in (self._scan_task, self._live_task) if t is not None
        ]
        if tasks:
            await asyncio.wait(tasks)
        for task in tasks:
            if not task.cancelled() and task.exception() is not None:
                # Already logged by the task itself
                logger.debug("Watcher task ended with %r", task.exception())

        self._live_task = None
        self._scan_task = None
        self._queue.put_nowait(None)
        logger.info("Directory watcher stopped for %s", self.root)

    async def __aenter__(self) -> DirectoryWatcher:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def events(self) -> AsyncIterator[WatchEvent]:
        """
        Iterate over dispatched events until the watcher stops.

        Events arrive in dispatch order. An event counts as consumed once
        the consumer asks for the next one.
        """
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return
                yield event
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every event dispatched so far has been consumed."""
        await self._queue.join()

    def dispatch(self, event: WatchEvent) -> bool:
        """
        Filter an event and queue it for consumers.

        Creations and changes are kept only if the path is a directory
        right now; deletions are always kept since the type of a removed
        entry can no longer be queried.

        Returns:
            True if the event was queued
        """
        if self._closed:
            return False
        if event.kind is not EventKind.DELETED and not os.path.isdir(
            event.path
        ):
            logger.debug(
                "Skipping non-directory %s (%s)", event.path, event.kind.value
            )
            return False
        self._queue.put_nowait(event)
        return True

    async def _watch_loop(self) -> None:
        """Live subscription loop (runs as a task)."""
        logger.debug("Starting watch loop on %s", self.root)
        try:
            async for changes in awatch(
                self.root,
                watch_filter=None,
                debounce=self.debounce_ms,
                stop_event=self._stop_event,
                recursive=False,
            ):
                for event in translate_changes(changes, self.root):
                    self.dispatch(event)
        except OSError as e:
            logger.error("Watch on %s failed: %s", self.root, e)
            raise

    async def _scan(self) -> None:
        """Initial listing; replays existing children as created events."""
        names: list[str] = []
        try:
            async with aclosing(iter_pages(self.root, self.page_size)) as pages:
                async for page in pages:
                    if self._closed:
                        logger.debug("Initial scan of %s abandoned", self.root)
                        return
                    names.extend(page)

            for name in sorted(names):
                self.dispatch(
                    WatchEvent(
                        path=str(self.root / name), kind=EventKind.CREATED
                    )
                )
            logger.info(
                "Initial scan of %s found %d entries", self.root, len(names)
            )
        except OSError as e:
            # Live events keep flowing; the index stays partial.
            self.scan_error = e
            logger.error("Initial scan of %s failed: %s", self.root, e)
        finally:
            self.scanned.set()
