"""Neovim Project Search - live search over the projects in ~/dev.

Features:
- Directory watcher keeps the project index current without rescans
- Case-insensitive multi-term matching on project names
- Opens projects in Neovim inside a terminal window

Usage:
    nvim-project-search              # Run MCP server (default)
    nvim-project-search list         # List indexed projects
    nvim-project-search search api   # Search projects
    nvim-project-search open api     # Open a project
"""

from .cli import main
from .provider import SearchProvider

__all__ = ["SearchProvider", "main"]
