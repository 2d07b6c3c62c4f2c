"""Registry of built-in commands and aliases."""

from __future__ import annotations

import builtins
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from myshell.core.shell import Shell

ActionHandler = Callable[[list[str], "Shell"], Awaitable[None] | None]


class Action(ABC):
    """Something the shell runs in-process instead of spawning a program."""

    kind: str

    @abstractmethod
    def invoke(self, args: list[str], shell: Shell) -> Awaitable[None] | None:
        """Run the action with the arguments that followed its name."""


@dataclass(frozen=True)
class NativeAction(Action):
    """A Python callable registered as a built-in."""

    handler: ActionHandler
    description: str = ""
    kind: str = "native"

    def invoke(self, args: list[str], shell: Shell) -> Awaitable[None] | None:
        return self.handler(args, shell)


@dataclass(frozen=True)
class AliasAction(Action):
    """A command line re-run through the shell, extra arguments appended."""

    command_line: str
    kind: str = "alias"

    @property
    def description(self) -> str:
        return f"alias for '{self.command_line}'"

    def invoke(self, args: list[str], shell: Shell) -> Awaitable[None] | None:
        return shell.run_segment(" ".join([self.command_line, *args]))


class CommandRegistry:
    """Mutable name to action mapping shared by the dispatcher and built-ins."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    def register(self, name: str, action: Action) -> None:
        if not name or any(ch.isspace() for ch in name):
            raise ValueError(f"Invalid command name: {name!r}")
        self._actions[name] = action
        logger.debug("registry.register name={} kind={}", name, action.kind)

    def command(self, name: str, *, description: str = "") -> Callable[[ActionHandler], ActionHandler]:
        """Register the decorated function as a native built-in."""

        def decorator(handler: ActionHandler) -> ActionHandler:
            self.register(name, NativeAction(handler=handler, description=description))
            return handler

        return decorator

    def alias(self, name: str, command_line: str) -> AliasAction:
        action = AliasAction(command_line=command_line.strip())
        self.register(name, action)
        return action

    def lookup(self, name: str) -> Action | None:
        return self._actions.get(name)

    def has(self, name: str) -> bool:
        return name in self._actions

    def names(self) -> builtins.list[str]:
        return sorted(self._actions)

    def aliases(self) -> dict[str, str]:
        return {
            name: action.command_line
            for name, action in sorted(self._actions.items())
            if isinstance(action, AliasAction)
        }
