"""Editor launch utilities.

Provides:
- build_command(): Expand a command template for one project
- LaunchRequest: What to run, where, and under which window title
- ProcessLauncher: Spawn the editor as a detached process

Commands are executed directly with subprocess.Popen, never through a
shell, so directory names cannot inject commands. The child runs in its
own session and is not tied to the event loop, so it outlives the
process that launched it.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)

TITLE_PREFIX = "Neovim"


class LaunchError(Exception):
    """Raised when the editor process cannot be started."""

    def __init__(self, message: str, argv: list[str] | None = None):
        super().__init__(message)
        self.argv = argv or []


@dataclass(frozen=True)
class LaunchRequest:
    """A request to open a project in the editor."""

    path: str
    title: str
    argv: list[str] = field(default_factory=list)


def make_title(name: str) -> str:
    """
    Build the window title for a project.

    Example:
        >>> make_title("api")
        'Neovim api'
    """
    return f"{TITLE_PREFIX} {name}"


def build_command(
    template: str, *, name: str, path: str, title: str
) -> list[str]:
    """
    Expand a command template into an argument vector.

    The template is split like a shell command line first, then each
    argument is formatted, so substituted values always stay a single
    argument no matter what characters they contain.

    Args:
        template: Command line with optional {name}, {path}, {title}
        name: Project name
        path: Project directory
        title: Window title

    Returns:
        Argument vector ready for exec

    Raises:
        ValueError: If the template is empty, unbalanced, or uses an
            unknown placeholder

    Example:
        >>> build_command("term --title {title} -e nvim",
        ...               name="api", path="/d/api", title="Neovim api")
        ['term', '--title', 'Neovim api', '-e', 'nvim']
    """
    parts = shlex.split(template)
    if not parts:
        raise ValueError("Command template is empty")
    try:
        return [p.format(name=name, path=path, title=title) for p in parts]
    except (KeyError, IndexError) as e:
        raise ValueError(
            f"Unknown placeholder in command template: {e}"
        ) from e


class Launcher(Protocol):
    """Collaborator that performs the actual launch."""

    async def launch(self, request: LaunchRequest) -> None: ...


class ProcessLauncher:
    """Starts the editor in its own session and does not wait for it."""

    def __init__(self) -> None:
        self._children: list[subprocess.Popen] = []

    async def launch(self, request: LaunchRequest) -> None:
        """
        Spawn the request's command in the project directory.

        Raises:
            LaunchError: If the process cannot be started
        """
        if not request.argv:
            raise LaunchError("No command to launch", request.argv)

        self._reap()
        try:
            process = subprocess.Popen(
                request.argv,
                cwd=request.path,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise LaunchError(
                f"Failed to launch {shlex.join(request.argv)}: {e}",
                request.argv,
            ) from e

        logger.info(
            "Launched %s (pid %d) in %s",
            request.title,
            process.pid,
            request.path,
        )
        self._children.append(process)

    def _reap(self) -> None:
        """Collect exit statuses of editors that have already closed."""
        self._children = [p for p in self._children if p.poll() is None]
