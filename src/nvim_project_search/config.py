"""Configuration for the Neovim project search provider."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Default projects root
DEFAULT_ROOT = Path.home() / "dev"

DEFAULT_PAGE_SIZE = 100
DEFAULT_WRAP_WIDTH = 15
DEFAULT_DEBOUNCE_MS = 200

# Placeholders: {name}, {path}, {title}. Split with shlex, never run in a shell.
DEFAULT_COMMAND = "alacritty --class Neovim --title {title} -e nvim"


def _int_from_env(var: str, default: int, minimum: int = 1) -> int:
    """Read a positive integer from the environment, falling back on error."""
    raw = os.environ.get(var)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %d", var, raw, default)
        return default
    if value < minimum:
        logger.warning("%s must be >= %d, using %d", var, minimum, default)
        return default
    return value


def get_root() -> Path:
    """
    Get the directory whose children are indexed as projects.

    Set NVIM_PROJECTS_ROOT to customize the location.
    Defaults to ~/dev

    Returns:
        Path to the projects root.
    """
    env_path = os.environ.get("NVIM_PROJECTS_ROOT")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_ROOT


def get_page_size() -> int:
    """
    Get the number of entries read per page during the initial scan.

    Set NVIM_PROJECTS_PAGE_SIZE to customize.
    Defaults to 100 entries.

    Returns:
        Page size for directory listing.
    """
    return _int_from_env("NVIM_PROJECTS_PAGE_SIZE", DEFAULT_PAGE_SIZE)


def get_wrap_width() -> int:
    """
    Get the column at which project names are wrapped for display.

    Set NVIM_PROJECTS_WRAP_WIDTH to customize.
    Defaults to 15 columns.

    Returns:
        Wrap width in characters.
    """
    return _int_from_env("NVIM_PROJECTS_WRAP_WIDTH", DEFAULT_WRAP_WIDTH)


def get_debounce_ms() -> int:
    """
    Get the debounce window for batching filesystem notifications.

    Set NVIM_PROJECTS_DEBOUNCE_MS to customize.
    Defaults to 200 milliseconds.

    Returns:
        Debounce in milliseconds.
    """
    return _int_from_env("NVIM_PROJECTS_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS)


def get_command_template() -> str:
    """
    Get the command line used to open a project.

    Set NVIM_PROJECTS_COMMAND to customize. The value is split like a
    shell command line and each argument may use {name}, {path} and
    {title} placeholders. It is executed directly, never through a shell.

    Returns:
        Command template string.
    """
    return os.environ.get("NVIM_PROJECTS_COMMAND") or DEFAULT_COMMAND
