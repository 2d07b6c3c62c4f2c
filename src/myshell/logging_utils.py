"""Runtime logging helpers."""

from __future__ import annotations

import os
import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
_CONFIGURED_LEVEL: str | None = None


def configure_logging(level: str | None = None) -> None:
    """Configure process-level logging once per level."""

    global _CONFIGURED_LEVEL
    resolved = (level or os.getenv("MYSHELL_LOG_LEVEL", "WARNING")).upper()
    if resolved == _CONFIGURED_LEVEL:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=resolved,
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    _CONFIGURED_LEVEL = resolved
