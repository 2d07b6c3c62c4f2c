from __future__ import annotations

import pytest

from myshell.core.executor import ProcessExecutor
from myshell.core.history import History
from myshell.core.registry import CommandRegistry
from myshell.core.shell import Shell


class RecordingOutput:
    """Output sink that keeps everything in memory."""

    def __init__(self) -> None:
        self.stdout: list[str] = []
        self.stderr: list[str] = []
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.cleared = 0

    def write(self, text: str) -> None:
        self.stdout.append(text)

    def write_error(self, text: str) -> None:
        self.stderr.append(text)

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def clear(self) -> None:
        self.cleared += 1

    @property
    def text(self) -> str:
        return "".join(self.stdout)

    @property
    def error_text(self) -> str:
        return "".join(self.stderr)


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def shell(registry: CommandRegistry, output: RecordingOutput) -> Shell:
    return Shell(
        registry,
        output,
        history=History(max_size=100),
        executor=ProcessExecutor(output, kill_grace_seconds=1.0),
    )
