"""SearchProvider - host-facing interface to the live project index.

Provides:
- SearchProvider: owns the ProjectIndex, the DirectoryWatcher and the task
  applying watcher events; answers search, metadata and activation calls
- ActivationDispatcher: turns a result id into an editor launch

Lifecycle:
    provider = SearchProvider(root)
    await provider.start()       # subscribe, then scan in the background
    await provider.wait_ready()  # optional: initial scan applied
    ids = provider.get_initial_result_set(["api"])
    await provider.activate_result(ids[0])
    await provider.stop()        # release the watch

Everything runs on one event loop. Watcher events are applied by a single
consumer task in delivery order; search calls see the index as of the
last applied event.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .config import (
    get_command_template,
    get_debounce_ms,
    get_page_size,
    get_root,
    get_wrap_width,
)
from .formatting import build_metas, filter_results
from .index import DirectoryWatcher, ProjectIndex, match_projects
from .launcher import LaunchRequest, ProcessLauncher, build_command, make_title

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .formatting import ResultMeta
    from .launcher import Launcher

logger = logging.getLogger(__name__)


class ActivationDispatcher:
    """Resolves a result id to a project and asks the launcher to open it."""

    def __init__(
        self,
        index: ProjectIndex,
        launcher: Launcher,
        command_template: str,
    ):
        self.index = index
        self.launcher = launcher
        self.command_template = command_template

    def build_request(self, project_id: str) -> LaunchRequest | None:
        """Build the launch request for an id, or None if unknown."""
        project = self.index.lookup(project_id)
        if project is None:
            return None

        title = make_title(project.name)
        argv = build_command(
            self.command_template,
            name=project.name,
            path=project.path,
            title=title,
        )
        return LaunchRequest(path=project.path, title=title, argv=argv)

    async def activate(self, project_id: str) -> LaunchRequest | None:
        """
        Launch the editor for a result id.

        Returns:
            The issued LaunchRequest, or None if the id is unknown

        Raises:
            LaunchError: If the launcher fails to start the process
        """
        request = self.build_request(project_id)
        if request is None:
            logger.warning("Failed to find project with id: %s", project_id)
            return None

        await self.launcher.launch(request)
        return request


class SearchProvider:
    """
    Live project search over the children of a root directory.

    Construct one per host; there is no process-wide instance. The host
    calls start() before querying and stop() on shutdown.
    """

    def __init__(
        self,
        root: Path,
        *,
        launcher: Launcher | None = None,
        command_template: str | None = None,
        page_size: int | None = None,
        debounce_ms: int | None = None,
        wrap_width: int | None = None,
    ):
        """
        Initialize the provider.

        Args:
            root: Directory whose immediate children are projects
            launcher: Launch collaborator (spawns processes if None)
            command_template: Editor command (uses config default if None)
            page_size: Initial listing page size (config default if None)
            debounce_ms: Watch debounce (config default if None)
            wrap_width: Display name wrap width (config default if None)
        """
        self.index = ProjectIndex()
        self.watcher = DirectoryWatcher(
            root,
            page_size=page_size or get_page_size(),
            debounce_ms=debounce_ms or get_debounce_ms(),
        )
        self.wrap_width = wrap_width or get_wrap_width()
        self.dispatcher = ActivationDispatcher(
            self.index,
            launcher or ProcessLauncher(),
            command_template or get_command_template(),
        )
        self._consumer: asyncio.Task | None = None

    @classmethod
    def from_config(cls, launcher: Launcher | None = None) -> SearchProvider:
        """Create a provider using environment configuration."""
        return cls(get_root(), launcher=launcher)

    @property
    def root(self) -> Path:
        """Get the watched root directory."""
        return self.watcher.root

    @property
    def is_running(self) -> bool:
        """Check if the provider is indexing live changes."""
        return self._consumer is not None and not self._consumer.done()

    async def start(self) -> None:
        """
        Start watching and indexing.

        Raises:
            WatcherError: If the root cannot be watched
        """
        await self.watcher.start()
        self._consumer = asyncio.create_task(
            self._consume(), name="SearchProvider.consume"
        )
        logger.info("Search provider started for %s", self.root)

    async def stop(self) -> None:
        """Stop watching and drop the index."""
        consumer, self._consumer = self._consumer, None
        try:
            await self.watcher.stop()
        finally:
            # Also runs when stop() itself is cancelled mid-teardown.
            self.index.clear()
            if consumer is not None:
                consumer.cancel()
                await asyncio.wait([consumer])
        logger.info("Search provider stopped for %s", self.root)

    async def wait_ready(self) -> None:
        """Wait until the initial scan has been applied to the index."""
        await self.watcher.scanned.wait()
        await self.watcher.drain()

    async def __aenter__(self) -> SearchProvider:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _consume(self) -> None:
        """Apply watcher events to the index (runs as a task)."""
        async for event in self.watcher.events():
            logger.debug("Event %s %s", event.kind.value, event.path)
            self.index.apply(event)

    # ========== Host Contract ==========

    def get_initial_result_set(self, terms: Sequence[str]) -> list[str]:
        """Ids of all projects whose name matches every term."""
        return match_projects(self.index, terms)

    def get_subsearch_result_set(
        self, previous_results: Sequence[str], terms: Sequence[str]
    ) -> list[str]:
        """
        Narrow a previous search.

        Re-runs the full search rather than filtering previous_results,
        so projects added or removed since then are accounted for.
        """
        return self.get_initial_result_set(terms)

    def get_result_metas(self, ids: Sequence[str]) -> list[ResultMeta]:
        """Display metadata for known ids; unknown ids are skipped."""
        return build_metas(self.index, ids, self.wrap_width)

    def filter_results(
        self, results: Sequence[str], max_results: int
    ) -> list[str]:
        """Truncate results to max_results entries."""
        return filter_results(list(results), max_results)

    async def activate_result(self, project_id: str) -> LaunchRequest | None:
        """Open the project in the editor; unknown ids are logged."""
        return await self.dispatcher.activate(project_id)
