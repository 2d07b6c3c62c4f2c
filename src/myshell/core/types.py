"""Shared core dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class RedirectionKind(StrEnum):
    READ = "read"
    TRUNCATE = "truncate"
    APPEND = "append"


@dataclass(frozen=True)
class StageSpec:
    """One program invocation: a command name and its arguments."""

    command: str
    args: tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: str) -> StageSpec | None:
        words = text.split()
        if not words:
            return None
        return cls(command=words[0], args=tuple(words[1:]))

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]


@dataclass(frozen=True)
class RedirectionSpec:
    """A file that replaces the standard input or output of a stage."""

    kind: RedirectionKind
    path: str


@dataclass(frozen=True)
class ExecutionPlan:
    """Parsed form of one segment.

    More than one stage means a pipeline; a redirection only ever comes with a
    single stage.
    """

    stages: tuple[StageSpec, ...]
    redirection: RedirectionSpec | None = None

    @property
    def is_pipeline(self) -> bool:
        return len(self.stages) > 1

    @property
    def is_simple(self) -> bool:
        return len(self.stages) == 1 and self.redirection is None


@dataclass(frozen=True)
class ExecutionResult:
    """Exit codes of every stage, None for stages that never started."""

    returncodes: tuple[int | None, ...]

    @property
    def returncode(self) -> int | None:
        return self.returncodes[-1] if self.returncodes else None
