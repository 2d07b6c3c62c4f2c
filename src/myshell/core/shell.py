"""Line sequencing: split on ``;`` and run each segment in order."""

from __future__ import annotations

from loguru import logger

from myshell.core.dispatcher import BuiltinDispatcher
from myshell.core.executor import ProcessExecutor
from myshell.core.history import History
from myshell.core.output import Output
from myshell.core.parser import build_plan, split_segments
from myshell.core.registry import CommandRegistry
from myshell.errors import RuntimeProcessError, ShellError


class Shell:
    """Interpret input lines against a command registry.

    Each segment finishes (built-in returned, or every spawned process exited)
    before the next one starts. Errors are reported per segment and never stop
    the remaining segments of the line.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        output: Output,
        *,
        history: History | None = None,
        executor: ProcessExecutor | None = None,
    ) -> None:
        self.registry = registry
        self.output = output
        self.history = history if history is not None else History()
        self.executor = executor if executor is not None else ProcessExecutor(output)
        self.dispatcher = BuiltinDispatcher(registry)
        self._exit_requested = False

    @property
    def exit_requested(self) -> bool:
        return self._exit_requested

    def request_exit(self) -> None:
        self._exit_requested = True

    async def run(self, line: str) -> None:
        """Record one input line in history and run its segments."""
        self.history.append(line)
        for segment in split_segments(line):
            if self._exit_requested:
                logger.debug("segment.skipped reason=exit text={}", segment)
                break
            await self.run_segment(segment)

    async def run_segment(self, segment: str) -> None:
        logger.debug("segment.start text={}", segment)
        try:
            await self._execute_segment(segment)
        except ShellError as exc:
            logger.debug("segment.error type={} text={}", type(exc).__name__, segment)
            self.output.error(str(exc))
            return
        logger.debug("segment.end text={}", segment)

    async def _execute_segment(self, segment: str) -> None:
        plan = build_plan(segment)
        # Built-ins only apply to a lone stage without operators.
        if plan.is_simple and await self.dispatcher.dispatch(plan.stages[0], self):
            return

        result = await self.executor.execute(plan)
        if result.returncode:
            raise RuntimeProcessError(plan.stages[-1].command, result.returncode)
