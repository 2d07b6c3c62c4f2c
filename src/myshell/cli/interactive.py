"""Interactive prompt loop for myshell."""

from __future__ import annotations

import asyncio
import os
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.patch_stdout import patch_stdout

from myshell.config import Settings
from myshell.core.shell import Shell

from .render import Renderer

STANDARD_COMMANDS = ("ls", "cd", "pwd", "cat", "mkdir")


def display_directory(cwd: str | None = None, home: str | None = None) -> str:
    """Return the working directory with the home prefix replaced by ``~``."""
    directory = Path(cwd if cwd is not None else os.getcwd())
    home_dir = Path(home) if home is not None else Path.home()
    if directory == home_dir:
        return "~"
    if directory.is_relative_to(home_dir):
        return str(Path("~") / directory.relative_to(home_dir))
    return str(directory)


class InteractiveShell:
    """Read lines from the terminal and run them until exit or end-of-input."""

    def __init__(self, shell: Shell, renderer: Renderer, settings: Settings, *, persist_history: bool = True) -> None:
        self.shell = shell
        self.renderer = renderer
        self.settings = settings
        self.persist_history = persist_history
        self._session: PromptSession[str] | None = None

    def completion_words(self) -> list[str]:
        return sorted({*self.shell.registry.names(), *STANDARD_COMMANDS})

    def prompt_message(self) -> FormattedText:
        return FormattedText([
            ("ansigreen", self.settings.prompt_name),
            ("ansiblue", "["),
            ("ansiyellow", display_directory()),
            ("ansiblue", "]➜ "),
        ])

    def key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()

        @bindings.add("c-l")
        def _clear_screen(event: KeyPressEvent) -> None:
            self.renderer.clear()
            event.app.renderer.clear()

        return bindings

    def _build_session(self) -> PromptSession[str]:
        history = InMemoryHistory()
        for line in self.shell.history.entries():
            history.append_string(line)
        return PromptSession(
            history=history,
            completer=WordCompleter(self.completion_words),
            complete_while_typing=False,
            key_bindings=self.key_bindings(),
        )

    async def _read_line(self) -> str:
        if self._session is None:
            self._session = self._build_session()
        with patch_stdout(raw=True):
            return await self._session.prompt_async(self.prompt_message())

    async def run(self) -> None:
        self.renderer.welcome()
        while not self.shell.exit_requested:
            try:
                line = await self._read_line()
            except KeyboardInterrupt:
                self.renderer.info("^C")
                continue
            except EOFError:
                break
            stripped = line.strip()
            if not stripped:
                continue
            if self.settings.show_timestamp:
                self.renderer.timestamp()
            await self.run_line(stripped)
        self.close()

    async def run_line(self, line: str) -> None:
        """Run one line; an interrupt cancels it and its child processes."""
        task = asyncio.ensure_future(self.shell.run(line))
        with _cancel_on_interrupt(task):
            try:
                await task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
                self.renderer.info("^C")
            except Exception as exc:
                # Keep the session alive after unexpected failures.
                logger.opt(exception=exc).debug("repl.line.error line={}", line)
                self.renderer.error(f"Unexpected error: {exc!s}")

    def close(self) -> None:
        if self.persist_history and not self.shell.history.save():
            self.renderer.warning("Could not save history file")
        self.renderer.goodbye()


@contextmanager
def _cancel_on_interrupt(task: asyncio.Future[None]) -> Iterator[None]:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, task.cancel)
    except (NotImplementedError, RuntimeError, ValueError):
        yield
        return
    try:
        yield
    finally:
        loop.remove_signal_handler(signal.SIGINT)
