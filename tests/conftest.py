"""Shared pytest fixtures for nvim-project-search tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from nvim_project_search.index.store import ProjectIndex
from nvim_project_search.launcher import LaunchRequest


class RecordingLauncher:
    """Launcher that records requests instead of spawning processes."""

    def __init__(self) -> None:
        self.requests: list[LaunchRequest] = []

    async def launch(self, request: LaunchRequest) -> None:
        self.requests.append(request)


async def _wait_until(
    predicate, timeout: float = 5.0, interval: float = 0.02
):
    """Poll predicate on the event loop until it holds or time runs out."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met within timeout")
        await asyncio.sleep(interval)


@pytest.fixture
def projects_root(tmp_path: Path) -> Path:
    """A projects root with two project dirs and one stray file."""
    root = tmp_path / "dev"
    root.mkdir()
    (root / "api").mkdir()
    (root / "web").mkdir()
    (root / "notes.txt").write_text("not a project")
    return root.resolve()


@pytest.fixture
def index() -> ProjectIndex:
    """Index holding api, web and an api-gateway project."""
    idx = ProjectIndex()
    idx.upsert("/home/user/dev/api", "api")
    idx.upsert("/home/user/dev/web", "web")
    idx.upsert("/home/user/dev/api-gateway", "api-gateway")
    return idx


@pytest.fixture
def wait_until():
    """Helper coroutine that polls a predicate until it holds."""
    return _wait_until


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()
