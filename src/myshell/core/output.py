"""Output sink protocol shared by the executor, the shell and built-ins."""

from __future__ import annotations

from typing import Protocol


class Output(Protocol):
    def write(self, text: str) -> None:
        """Write program output verbatim."""

    def write_error(self, text: str) -> None:
        """Write program error output verbatim, highlighted."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def clear(self) -> None: ...
