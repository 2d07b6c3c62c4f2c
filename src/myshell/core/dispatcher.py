"""Built-in command dispatch."""

from __future__ import annotations

import inspect
import time
from typing import TYPE_CHECKING

from loguru import logger

from myshell.core.registry import AliasAction, CommandRegistry
from myshell.core.types import StageSpec
from myshell.errors import BuiltinActionError, ShellError

if TYPE_CHECKING:
    from myshell.core.shell import Shell


class BuiltinDispatcher:
    """Run a stage in-process when its command is registered."""

    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry
        self._expanding: set[str] = set()

    async def dispatch(self, stage: StageSpec, shell: Shell) -> bool:
        """Invoke the registered action for the stage, if there is one.

        Returns False when the caller has to spawn an external program
        instead. An alias is not expanded again inside its own expansion.
        """
        action = self.registry.lookup(stage.command)
        if action is None:
            return False
        is_alias = isinstance(action, AliasAction)
        if is_alias and stage.command in self._expanding:
            return False

        logger.debug("builtin.call.start name={} kind={} args={}", stage.command, action.kind, list(stage.args))
        start = time.monotonic()
        if is_alias:
            self._expanding.add(stage.command)
        try:
            result = action.invoke(list(stage.args), shell)
            if inspect.isawaitable(result):
                await result
        except ShellError:
            raise
        except Exception as exc:
            logger.opt(exception=exc).debug("builtin.call.error name={}", stage.command)
            raise BuiltinActionError(stage.command, str(exc) or type(exc).__name__) from exc
        finally:
            self._expanding.discard(stage.command)
            duration = time.monotonic() - start
            logger.debug("builtin.call.end name={} duration={:.3f}ms", stage.command, duration * 1000)
        return True
