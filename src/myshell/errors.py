"""Application-level exception types for myshell."""

from __future__ import annotations


class ShellError(Exception):
    """Base exception for errors reported at a segment boundary."""


class ParseError(ShellError):
    """Raised when a segment cannot be turned into an execution plan."""

    def __init__(self, segment: str, reason: str) -> None:
        super().__init__(f"Error: {reason}: {segment}")
        self.segment = segment
        self.reason = reason


class SpawnError(ShellError):
    """Raised when an external program cannot be started."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"Error: {command}: {reason}")
        self.command = command
        self.reason = reason


class FileReadError(ShellError):
    """Raised when an input redirection source cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Error reading input file: {path}: {reason}")
        self.path = path
        self.reason = reason


class FileWriteError(ShellError):
    """Raised when an output redirection target cannot be opened."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Error writing output file: {path}: {reason}")
        self.path = path
        self.reason = reason


class BuiltinActionError(ShellError):
    """Raised when a built-in command fails."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason


class RuntimeProcessError(ShellError):
    """Raised when the final stage of a segment exits with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f"Error: {command} exited with status {returncode}")
        self.command = command
        self.returncode = returncode
