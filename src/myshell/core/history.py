"""In-memory command history with optional file persistence."""

from __future__ import annotations

import builtins
from pathlib import Path

from loguru import logger


class History:
    """Ordered list of input lines capped at ``max_size`` entries."""

    def __init__(self, path: Path | None = None, *, max_size: int = 1000) -> None:
        self.path = path
        self.max_size = max_size
        self._entries: list[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, line: str) -> None:
        self._entries.append(line)
        if len(self._entries) > self.max_size:
            del self._entries[: len(self._entries) - self.max_size]

    def entries(self) -> builtins.list[str]:
        return list(self._entries)

    def tail(self, limit: int | None = None) -> builtins.list[tuple[int, str]]:
        """Return the last ``limit`` entries with their 1-based positions."""
        total = len(self._entries)
        if limit is None or limit > total:
            limit = total
        if limit <= 0:
            return []
        first = total - limit
        return [(first + offset + 1, line) for offset, line in enumerate(self._entries[first:])]

    def load(self) -> None:
        """Read the history file, keeping the most recent entries."""
        if self.path is None or not self.path.exists():
            return
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("history.load.error path={} error={}", self.path, exc)
            return
        for line in text.splitlines():
            if line:
                self.append(line)
        logger.debug("history.load path={} entries={}", self.path, len(self._entries))

    def save(self) -> bool:
        """Write the capped history to the history file."""
        if self.path is None:
            return True
        try:
            self.path.write_text("\n".join(self._entries[-self.max_size :]), encoding="utf-8")
        except OSError as exc:
            logger.warning("history.save.error path={} error={}", self.path, exc)
            return False
        logger.debug("history.save path={} entries={}", self.path, len(self._entries))
        return True
