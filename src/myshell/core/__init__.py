"""Core interpreter components."""

from .dispatcher import BuiltinDispatcher
from .executor import ProcessExecutor
from .history import History
from .parser import build_plan, split_segments
from .registry import Action, AliasAction, CommandRegistry, NativeAction
from .shell import Shell
from .types import ExecutionPlan, ExecutionResult, RedirectionKind, RedirectionSpec, StageSpec

__all__ = [
    "Action",
    "AliasAction",
    "BuiltinDispatcher",
    "CommandRegistry",
    "ExecutionPlan",
    "ExecutionResult",
    "History",
    "NativeAction",
    "ProcessExecutor",
    "RedirectionKind",
    "RedirectionSpec",
    "Shell",
    "StageSpec",
    "build_plan",
    "split_segments",
]
