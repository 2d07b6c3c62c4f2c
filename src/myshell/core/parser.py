"""Segment splitting and stage building.

Parsing is deliberately naive: words are whitespace separated, there is no
quoting or escaping, and an operator character is an operator wherever it
appears. A path or argument containing ``;``, ``|``, ``<`` or ``>`` is split
apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from myshell.core.types import ExecutionPlan, RedirectionKind, RedirectionSpec, StageSpec
from myshell.errors import ParseError

SEGMENT_SEPARATOR = ";"
PIPE = "|"
READ_FROM = "<"
APPEND_TO = ">>"
WRITE_TO = ">"
# Longest first so ">>" is never scanned as two ">".
OPERATORS = (APPEND_TO, WRITE_TO, READ_FROM, PIPE)

TokenKind = Literal["word", "operator"]


@dataclass(frozen=True)
class Token:
    """A word or operator with its offsets in the scanned text."""

    kind: TokenKind
    text: str
    start: int
    end: int


def split_segments(line: str) -> list[str]:
    """Split one input line on every ``;`` and drop empty parts."""

    segments: list[str] = []
    for part in line.split(SEGMENT_SEPARATOR):
        stripped = part.strip()
        if stripped:
            segments.append(stripped)
    return segments


def tokenize(text: str) -> list[Token]:
    """Scan text into word and operator tokens."""

    tokens: list[Token] = []
    index = 0
    length = len(text)
    while index < length:
        if text[index].isspace():
            index += 1
            continue

        operator = _operator_at(text, index)
        if operator is not None:
            tokens.append(Token("operator", operator, index, index + len(operator)))
            index += len(operator)
            continue

        start = index
        while index < length and not text[index].isspace() and _operator_at(text, index) is None:
            index += 1
        tokens.append(Token("word", text[start:index], start, index))
    return tokens


def build_plan(segment: str) -> ExecutionPlan:
    """Turn one segment into an execution plan.

    The first matching rule wins: input redirection, then pipeline, then
    append redirection, then truncating redirection, then a plain command.
    """

    text = segment.strip()
    tokens = tokenize(text)
    if not tokens:
        raise ParseError(segment, "empty command")

    operators = [token for token in tokens if token.kind == "operator"]

    read_from = _first(operators, READ_FROM)
    if read_from is not None:
        return _redirected_plan(text, read_from, RedirectionKind.READ)

    pipes = [token for token in operators if token.text == PIPE]
    if pipes:
        return _pipeline_plan(text, pipes)

    for symbol, kind in ((APPEND_TO, RedirectionKind.APPEND), (WRITE_TO, RedirectionKind.TRUNCATE)):
        operator = _first(operators, symbol)
        if operator is not None:
            return _redirected_plan(text, operator, kind)

    return ExecutionPlan(stages=(_stage(text, text),))


def _operator_at(text: str, index: int) -> str | None:
    for operator in OPERATORS:
        if text.startswith(operator, index):
            return operator
    return None


def _first(operators: list[Token], symbol: str) -> Token | None:
    for token in operators:
        if token.text == symbol:
            return token
    return None


def _stage(part: str, segment: str) -> StageSpec:
    stage = StageSpec.from_text(part)
    if stage is None:
        raise ParseError(segment, "missing command")
    return stage


def _redirected_plan(text: str, operator: Token, kind: RedirectionKind) -> ExecutionPlan:
    stage = _stage(text[: operator.start], text)
    path = text[operator.end :].strip()
    if not path:
        raise ParseError(text, f"missing file after '{operator.text}'")
    return ExecutionPlan(stages=(stage,), redirection=RedirectionSpec(kind=kind, path=path))


def _pipeline_plan(text: str, pipes: list[Token]) -> ExecutionPlan:
    stages: list[StageSpec] = []
    start = 0
    for pipe in [*pipes, None]:
        end = pipe.start if pipe is not None else len(text)
        stage = StageSpec.from_text(text[start:end])
        if stage is None:
            raise ParseError(text, "empty pipeline stage")
        stages.append(stage)
        if pipe is not None:
            start = pipe.end
    return ExecutionPlan(stages=tuple(stages))
