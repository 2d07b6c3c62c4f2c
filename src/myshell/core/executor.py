"""Spawn external programs and wire their standard streams."""

from __future__ import annotations

import asyncio
import codecs
import os
from collections.abc import Awaitable, Callable
from contextlib import suppress
from pathlib import Path
from typing import IO

from loguru import logger

from myshell.core.output import Output
from myshell.core.types import ExecutionPlan, ExecutionResult, RedirectionKind, RedirectionSpec, StageSpec
from myshell.errors import FileReadError, FileWriteError, SpawnError

READ_CHUNK_SIZE = 4096
DEFAULT_KILL_GRACE_SECONDS = 2.0

Process = asyncio.subprocess.Process
StdinTarget = int | None
StdoutTarget = int | IO[bytes] | None


class ProcessExecutor:
    """Run an execution plan as OS processes and wait for all of them.

    Every process spawned for a plan is owned here until it has exited and
    its streams are drained. Cancelling ``execute`` terminates whatever is
    still running when ``terminate_on_interrupt`` is set.
    """

    def __init__(
        self,
        output: Output,
        *,
        terminate_on_interrupt: bool = True,
        kill_grace_seconds: float = DEFAULT_KILL_GRACE_SECONDS,
    ) -> None:
        self.output = output
        self.terminate_on_interrupt = terminate_on_interrupt
        self.kill_grace_seconds = kill_grace_seconds

    async def execute(self, plan: ExecutionPlan) -> ExecutionResult:
        if plan.is_pipeline:
            return await self._run_pipeline(plan.stages)

        stage = plan.stages[0]
        redirection = plan.redirection
        if redirection is None:
            return await self._run_plain(stage)
        if redirection.kind is RedirectionKind.READ:
            return await self._run_with_input(stage, redirection.path)
        return await self._run_with_output(stage, redirection)

    async def _run_plain(self, stage: StageSpec) -> ExecutionResult:
        process = await self._spawn(stage, stdin=None, stdout=asyncio.subprocess.PIPE)
        await self._supervise(
            [process],
            [self._pump(process.stdout, self.output.write), self._pump(process.stderr, self.output.write_error)],
        )
        return ExecutionResult(returncodes=(process.returncode,))

    async def _run_with_input(self, stage: StageSpec, path: str) -> ExecutionResult:
        data = _read_source(path)
        process = await self._spawn(stage, stdin=asyncio.subprocess.PIPE, stdout=asyncio.subprocess.PIPE)
        await self._supervise(
            [process],
            [
                self._feed(process.stdin, data),
                self._pump(process.stdout, self.output.write),
                self._pump(process.stderr, self.output.write_error),
            ],
        )
        return ExecutionResult(returncodes=(process.returncode,))

    async def _run_with_output(self, stage: StageSpec, redirection: RedirectionSpec) -> ExecutionResult:
        mode = "ab" if redirection.kind is RedirectionKind.APPEND else "wb"
        try:
            target = open(redirection.path, mode)  # noqa: SIM115
        except OSError as exc:
            raise FileWriteError(redirection.path, exc.strerror or str(exc)) from exc

        with target:
            process = await self._spawn(stage, stdin=None, stdout=target)
            await self._supervise([process], [self._pump(process.stderr, self.output.write_error)])
        return ExecutionResult(returncodes=(process.returncode,))

    async def _run_pipeline(self, stages: tuple[StageSpec, ...]) -> ExecutionResult:
        processes: list[Process | None] = []
        pumps: list[Awaitable[None]] = []
        upstream: int | None = None
        downstream: int | None = None
        last_index = len(stages) - 1
        try:
            for index, stage in enumerate(stages):
                is_last = index == last_index
                stdout: StdoutTarget = asyncio.subprocess.PIPE
                if not is_last:
                    downstream, stdout = os.pipe()
                try:
                    process: Process | None = await self._spawn(stage, stdin=upstream, stdout=stdout)
                except SpawnError as exc:
                    # The next stage reads end-of-input from this stage's pipe.
                    self.output.error(str(exc))
                    process = None
                finally:
                    if upstream is not None:
                        os.close(upstream)
                        upstream = None
                    if not is_last:
                        os.close(stdout)  # type: ignore[arg-type]
                upstream, downstream = downstream, None
                processes.append(process)
                if process is None:
                    continue
                pumps.append(self._pump(process.stderr, self.output.write_error))
                if is_last:
                    pumps.append(self._pump(process.stdout, self.output.write))
        except BaseException:
            for fd in (upstream, downstream):
                if fd is not None:
                    with suppress(OSError):
                        os.close(fd)
            for pump in pumps:
                _discard(pump)
            await self._terminate(processes)
            raise

        await self._supervise(processes, pumps)
        return ExecutionResult(returncodes=tuple(p.returncode if p is not None else None for p in processes))

    async def _spawn(self, stage: StageSpec, *, stdin: StdinTarget, stdout: StdoutTarget) -> Process:
        try:
            process = await asyncio.create_subprocess_exec(
                stage.command,
                *stage.args,
                stdin=stdin,
                stdout=stdout,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.debug("process.spawn.error argv={} error={}", stage.argv, exc)
            raise SpawnError(stage.command, exc.strerror or str(exc)) from exc
        logger.debug("process.spawn pid={} argv={}", process.pid, stage.argv)
        return process

    async def _supervise(self, processes: list[Process | None], pumps: list[Awaitable[None]]) -> None:
        running = [process for process in processes if process is not None]
        try:
            await asyncio.gather(*pumps, *(process.wait() for process in running))
        except asyncio.CancelledError:
            logger.debug("process.interrupted pids={}", [process.pid for process in running])
            if self.terminate_on_interrupt:
                await self._terminate(running)
            raise
        for process in running:
            logger.debug("process.exit pid={} returncode={}", process.pid, process.returncode)

    async def _terminate(self, processes: list[Process | None]) -> None:
        running = [process for process in processes if process is not None and process.returncode is None]
        if not running:
            return
        for process in running:
            with suppress(ProcessLookupError):
                process.terminate()
        waiters = [asyncio.ensure_future(process.wait()) for process in running]
        _, pending = await asyncio.wait(waiters, timeout=self.kill_grace_seconds)
        if not pending:
            return
        for process in running:
            if process.returncode is None:
                with suppress(ProcessLookupError):
                    process.kill()
        await asyncio.wait(pending)

    @staticmethod
    async def _pump(stream: asyncio.StreamReader | None, write: Callable[[str], None]) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while chunk := await stream.read(READ_CHUNK_SIZE):
            text = decoder.decode(chunk)
            if text:
                write(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            write(tail)

    @staticmethod
    async def _feed(stream: asyncio.StreamWriter | None, data: bytes) -> None:
        if stream is None:
            return
        try:
            stream.write(data)
            await stream.drain()
        except (BrokenPipeError, ConnectionResetError):
            logger.debug("process.stdin.closed_early bytes={}", len(data))
        finally:
            stream.close()


def _read_source(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileReadError(path, exc.strerror or str(exc)) from exc


def _discard(awaitable: Awaitable[None]) -> None:
    close = getattr(awaitable, "close", None)
    if close is not None:
        close()
