"""Command line interface for myshell."""

from .app import app, build_shell
from .interactive import InteractiveShell
from .render import Renderer

__all__ = [
    "InteractiveShell",
    "Renderer",
    "app",
    "build_shell",
]
