from pathlib import Path

import pytest

from myshell.builtin import register_builtin_commands
from myshell.core.registry import CommandRegistry
from myshell.core.shell import Shell


def _note_recorder(registry: CommandRegistry) -> list[list[str]]:
    calls: list[list[str]] = []

    @registry.command("note")
    def note(args: list[str], shell: Shell) -> None:
        calls.append(args)

    return calls


@pytest.mark.asyncio
async def test_segments_run_in_order_and_history_keeps_the_raw_line(shell, registry) -> None:
    calls = _note_recorder(registry)
    await shell.run("note a; note b;; note c")
    assert calls == [["a"], ["b"], ["c"]]
    assert shell.history.entries() == ["note a; note b;; note c"]


@pytest.mark.asyncio
async def test_external_segments_complete_in_order(shell, output) -> None:
    await shell.run("echo one; echo two; echo three")
    assert output.text == "one\ntwo\nthree\n"


@pytest.mark.asyncio
async def test_failed_segment_does_not_stop_the_line(shell, registry, output) -> None:
    calls = _note_recorder(registry)
    await shell.run("myshell-no-such-program --flag; note after")
    assert calls == [["after"]]
    assert len(output.errors) == 1
    assert output.errors[0].startswith("Error: myshell-no-such-program:")


@pytest.mark.asyncio
async def test_non_zero_exit_is_reported(shell, output) -> None:
    await shell.run("false")
    assert output.errors == ["Error: false exited with status 1"]


@pytest.mark.asyncio
async def test_parse_errors_are_reported(shell, output) -> None:
    await shell.run("echo hi >")
    assert len(output.errors) == 1
    assert output.errors[0].startswith("Error: missing file after '>'")


@pytest.mark.asyncio
async def test_builtin_exceptions_are_prefixed_with_their_name(shell, registry, output) -> None:
    @registry.command("boom")
    def boom(args: list[str], shell: Shell) -> None:
        raise ValueError("bad input")

    await shell.run("boom; boom")
    assert output.errors == ["boom: bad input", "boom: bad input"]


@pytest.mark.asyncio
async def test_async_builtins_are_awaited(shell, registry) -> None:
    seen: list[str] = []

    @registry.command("later")
    async def later(args: list[str], shell: Shell) -> None:
        seen.extend(args)

    await shell.run("later x y")
    assert seen == ["x", "y"]


@pytest.mark.asyncio
async def test_redirected_segments_never_use_builtins(shell, registry, output, tmp_path: Path, monkeypatch) -> None:
    register_builtin_commands(registry)
    monkeypatch.chdir(tmp_path)
    await shell.run("echo hi > out.txt")
    assert (tmp_path / "out.txt").read_text(encoding="utf-8") == "hi\n"
    assert output.text == ""


@pytest.mark.asyncio
async def test_pipeline_through_shell(shell, output) -> None:
    await shell.run("echo hello | tr a-z A-Z")
    assert output.text == "HELLO\n"


@pytest.mark.asyncio
async def test_input_redirection_through_shell(shell, output, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in.txt").write_text("from file\n", encoding="utf-8")
    await shell.run("cat < in.txt; cat < missing.txt")
    assert output.text == "from file\n"
    assert len(output.errors) == 1
    assert output.errors[0].startswith("Error reading input file: missing.txt")


@pytest.mark.asyncio
async def test_alias_behaves_like_the_aliased_command(shell, registry, output) -> None:
    register_builtin_commands(registry)
    await shell.run("echo HELLO")
    direct = output.text
    output.stdout.clear()

    await shell.run("alias greetloud=echo HELLO")
    await shell.run("greetloud")
    assert output.text == direct == "HELLO\n"


@pytest.mark.asyncio
async def test_alias_appends_extra_arguments(shell, registry, output) -> None:
    register_builtin_commands(registry)
    await shell.run("alias say=echo hi; say there")
    assert output.text == "hi there\n"


@pytest.mark.asyncio
async def test_alias_is_not_used_for_redirected_segments(shell, registry, output, tmp_path: Path, monkeypatch) -> None:
    register_builtin_commands(registry)
    monkeypatch.chdir(tmp_path)
    await shell.run("alias greetloud=echo HELLO; greetloud > out.txt")
    assert len(output.errors) == 1
    assert "greetloud" in output.errors[0]


@pytest.mark.asyncio
async def test_self_referencing_alias_falls_through_to_program(shell, registry, output, tmp_path: Path, monkeypatch) -> None:
    register_builtin_commands(registry)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "visible.txt").write_text("", encoding="utf-8")
    await shell.run("alias ls=ls -1")
    await shell.run("ls")
    assert "visible.txt\n" in output.text
    assert output.errors == []


@pytest.mark.asyncio
async def test_exit_skips_remaining_segments(shell, registry) -> None:
    register_builtin_commands(registry)
    calls = _note_recorder(registry)
    await shell.run("note before; exit; note after")
    assert shell.exit_requested
    assert calls == [["before"]]
