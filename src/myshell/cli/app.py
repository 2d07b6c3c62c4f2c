"""CLI main module for myshell."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from myshell.builtin import register_builtin_commands
from myshell.config import Settings, get_settings
from myshell.core.executor import ProcessExecutor
from myshell.core.history import History
from myshell.core.registry import CommandRegistry
from myshell.core.shell import Shell

from .interactive import InteractiveShell
from .render import Renderer, create_cli_renderer

app = typer.Typer(
    name="myshell",
    help="A small shell with pipes, redirection and built-in commands.",
    add_completion=False,
    rich_markup_mode="rich",
)


def build_shell(settings: Settings, renderer: Renderer, *, history_file: Path | None = None) -> Shell:
    """Wire registry, history and executor into a shell."""
    history = History(history_file, max_size=settings.max_history_size)
    history.load()

    registry = CommandRegistry()
    register_builtin_commands(registry)

    executor = ProcessExecutor(
        renderer,
        terminate_on_interrupt=settings.terminate_on_interrupt,
        kill_grace_seconds=settings.kill_grace_seconds,
    )
    return Shell(registry, renderer, history=history, executor=executor)


@app.command()
def main(
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Run one line and exit"),
    no_history: bool = typer.Option(False, "--no-history", help="Do not load or save the history file"),
) -> None:
    """Start the interactive shell, or run a single line with --command."""
    settings = get_settings()
    renderer = create_cli_renderer()
    history_file = None if no_history else settings.history_file
    shell = build_shell(settings, renderer, history_file=history_file)
    logger.debug("shell.start history_file={} builtins={}", history_file, len(shell.registry.names()))

    if command is not None:
        asyncio.run(shell.run(command))
        return

    interactive = InteractiveShell(shell, renderer, settings, persist_history=not no_history)
    asyncio.run(interactive.run())


if __name__ == "__main__":
    app()
