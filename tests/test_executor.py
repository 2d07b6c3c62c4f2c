import asyncio
import sys
from pathlib import Path

import pytest

from myshell.core.executor import ProcessExecutor
from myshell.core.types import ExecutionPlan, RedirectionKind, RedirectionSpec, StageSpec
from myshell.errors import FileReadError, FileWriteError, SpawnError

PYTHON = sys.executable


def _python(code: str) -> StageSpec:
    return StageSpec(PYTHON, ("-c", code))


class _TrackingExecutor(ProcessExecutor):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.spawned: list[asyncio.subprocess.Process] = []

    async def _spawn(self, stage, *, stdin, stdout):
        process = await super()._spawn(stage, stdin=stdin, stdout=stdout)
        self.spawned.append(process)
        return process


@pytest.mark.asyncio
async def test_plain_command_streams_stdout(output) -> None:
    executor = ProcessExecutor(output)
    result = await executor.execute(ExecutionPlan(stages=(StageSpec("echo", ("hello",)),)))
    assert result.returncode == 0
    assert output.text == "hello\n"
    assert output.error_text == ""


@pytest.mark.asyncio
async def test_plain_command_streams_stderr_separately(output) -> None:
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(stages=(_python("import sys; sys.stderr.write('boom'); print('ok')"),))
    result = await executor.execute(plan)
    assert result.returncode == 0
    assert output.text == "ok\n"
    assert output.error_text == "boom"


@pytest.mark.asyncio
async def test_plain_command_reports_exit_status(output) -> None:
    executor = ProcessExecutor(output)
    result = await executor.execute(ExecutionPlan(stages=(_python("raise SystemExit(3)"),)))
    assert result.returncodes == (3,)


@pytest.mark.asyncio
async def test_missing_program_raises_spawn_error(output) -> None:
    executor = ProcessExecutor(output)
    with pytest.raises(SpawnError) as exc_info:
        await executor.execute(ExecutionPlan(stages=(StageSpec("myshell-no-such-program"),)))
    assert exc_info.value.command == "myshell-no-such-program"
    assert str(exc_info.value).startswith("Error: myshell-no-such-program:")


@pytest.mark.asyncio
async def test_input_redirection_feeds_file_content(output, tmp_path: Path) -> None:
    source = tmp_path / "in.txt"
    source.write_text("line one\nline two\n", encoding="utf-8")
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(stages=(StageSpec("cat"),), redirection=RedirectionSpec(RedirectionKind.READ, str(source)))
    result = await executor.execute(plan)
    assert result.returncode == 0
    assert output.text == "line one\nline two\n"


@pytest.mark.asyncio
async def test_input_redirection_handles_large_input(output, tmp_path: Path) -> None:
    source = tmp_path / "big.txt"
    source.write_text("x" * 1_000_000, encoding="utf-8")
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(stages=(StageSpec("wc", ("-c",)),), redirection=RedirectionSpec(RedirectionKind.READ, str(source)))
    await executor.execute(plan)
    assert output.text.strip() == "1000000"


@pytest.mark.asyncio
async def test_missing_input_file_spawns_nothing(output, tmp_path: Path, monkeypatch) -> None:
    async def _fail(*args, **kwargs):
        raise AssertionError("process must not be spawned")

    monkeypatch.setattr("myshell.core.executor.asyncio.create_subprocess_exec", _fail)
    executor = ProcessExecutor(output)
    missing = str(tmp_path / "missing.txt")
    plan = ExecutionPlan(stages=(StageSpec("cat"),), redirection=RedirectionSpec(RedirectionKind.READ, missing))
    with pytest.raises(FileReadError) as exc_info:
        await executor.execute(plan)
    assert exc_info.value.path == missing


@pytest.mark.asyncio
async def test_output_redirection_truncates(output, tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    target.write_text("old content that is longer\n", encoding="utf-8")
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(
        stages=(StageSpec("echo", ("hi",)),),
        redirection=RedirectionSpec(RedirectionKind.TRUNCATE, str(target)),
    )
    await executor.execute(plan)
    assert target.read_text(encoding="utf-8") == "hi\n"
    assert output.text == ""


@pytest.mark.asyncio
async def test_output_redirection_appends(output, tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    target.write_text("first\n", encoding="utf-8")
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(
        stages=(StageSpec("echo", ("hi",)),),
        redirection=RedirectionSpec(RedirectionKind.APPEND, str(target)),
    )
    await executor.execute(plan)
    assert target.read_text(encoding="utf-8") == "first\nhi\n"


@pytest.mark.asyncio
async def test_output_redirection_still_shows_stderr(output, tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(
        stages=(_python("import sys; print('data'); sys.stderr.write('warn')"),),
        redirection=RedirectionSpec(RedirectionKind.TRUNCATE, str(target)),
    )
    await executor.execute(plan)
    assert target.read_text(encoding="utf-8") == "data\n"
    assert output.error_text == "warn"


@pytest.mark.asyncio
async def test_unwritable_output_target_raises(output, tmp_path: Path) -> None:
    executor = ProcessExecutor(output)
    target = str(tmp_path / "no-such-dir" / "out.txt")
    plan = ExecutionPlan(
        stages=(StageSpec("echo", ("hi",)),),
        redirection=RedirectionSpec(RedirectionKind.TRUNCATE, target),
    )
    with pytest.raises(FileWriteError):
        await executor.execute(plan)


@pytest.mark.asyncio
async def test_output_redirection_creates_file_even_when_spawn_fails(output, tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(
        stages=(StageSpec("myshell-no-such-program"),),
        redirection=RedirectionSpec(RedirectionKind.TRUNCATE, str(target)),
    )
    with pytest.raises(SpawnError):
        await executor.execute(plan)
    assert target.exists()


@pytest.mark.asyncio
async def test_pipeline_only_surfaces_last_stage_output(output) -> None:
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(stages=(StageSpec("echo", ("hello",)), StageSpec("cat"), StageSpec("tr", ("a-z", "A-Z"))))
    result = await executor.execute(plan)
    assert output.text == "HELLO\n"
    assert result.returncodes == (0, 0, 0)


@pytest.mark.asyncio
async def test_pipeline_surfaces_every_stage_stderr(output) -> None:
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(
        stages=(
            _python("import sys; sys.stderr.write('first\\n'); print('data')"),
            _python("import sys; sys.stderr.write('second\\n'); sys.stdout.write(sys.stdin.read().upper())"),
        )
    )
    await executor.execute(plan)
    assert output.text == "DATA\n"
    assert "first\n" in output.error_text
    assert "second\n" in output.error_text


@pytest.mark.asyncio
async def test_pipeline_spawn_failure_keeps_other_stages_running(output) -> None:
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(
        stages=(StageSpec("echo", ("hello",)), StageSpec("myshell-no-such-program"), StageSpec("cat")),
    )
    result = await executor.execute(plan)
    assert result.returncodes[1] is None
    assert result.returncodes[2] == 0
    assert len(output.errors) == 1
    assert "myshell-no-such-program" in output.errors[0]
    assert output.text == ""


@pytest.mark.asyncio
async def test_decodes_multibyte_output(output) -> None:
    executor = ProcessExecutor(output)
    plan = ExecutionPlan(stages=(_python("import sys; sys.stdout.buffer.write('héllo ✓'.encode())"),))
    await executor.execute(plan)
    assert output.text == "héllo ✓"


@pytest.mark.asyncio
async def test_cancel_terminates_children(output) -> None:
    executor = _TrackingExecutor(output, kill_grace_seconds=1.0)
    plan = ExecutionPlan(stages=(StageSpec("sleep", ("30",)), StageSpec("cat")))
    task = asyncio.ensure_future(executor.execute(plan))
    while len(executor.spawned) < 2:
        await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert all(process.returncode is not None for process in executor.spawned)


@pytest.mark.asyncio
async def test_cancel_leaves_children_when_disabled(output) -> None:
    executor = _TrackingExecutor(output, terminate_on_interrupt=False)
    task = asyncio.ensure_future(executor.execute(ExecutionPlan(stages=(StageSpec("sleep", ("30",)),))))
    while not executor.spawned:
        await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    process = executor.spawned[0]
    assert process.returncode is None
    process.kill()
    await process.wait()
