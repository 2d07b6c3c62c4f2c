"""Built-in command definitions."""

from __future__ import annotations

import asyncio
import os
import platform
import re
import secrets
import shutil
import string
import time
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote

import psutil
from rich.markup import escape

from myshell.core.registry import CommandRegistry
from myshell.errors import BuiltinActionError

if TYPE_CHECKING:
    from myshell.core.output import Output
    from myshell.core.shell import Shell

ALIAS_RE = re.compile(r"^(\w+)=(.+)$")
HIDDEN_FLAGS = {"-a", "-la", "-al"}
RECURSIVE_FLAGS = {"-r", "-rf"}
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*()_+"
DEFAULT_PASSWORD_LENGTH = 12
DEFAULT_BANNER_TEXT = "My Shell"
QR_CODE_ENDPOINT = "https://api.qrserver.com/v1/create-qr-code/?size=150x150&data="
GIB = 1024**3


def _os_reason(exc: OSError, target: str) -> str:
    return f"{exc.strerror or exc}: {target}"


def _first_operand(args: list[str]) -> str | None:
    for arg in args:
        if not arg.startswith("-"):
            return arg
    return None


def _write_line(output: Output, text: str) -> None:
    output.write(text if text.endswith("\n") else text + "\n")


def _find(output: Output, directory: Path, pattern: str) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda path: path.name)
    except OSError as exc:
        output.error(f"find: {_os_reason(exc, str(directory))}")
        return
    for entry in entries:
        if pattern in entry.name:
            _write_line(output, str(entry))
        if entry.is_dir() and not entry.is_symlink():
            _find(output, entry, pattern)


def _cpu_model() -> str:
    try:
        lines = Path("/proc/cpuinfo").read_text(encoding="utf-8").splitlines()
    except OSError:
        lines = []
    for line in lines:
        key, _, value = line.partition(":")
        if key.strip() == "model name":
            return value.strip()
    return platform.processor() or "unknown"


def _boxed(text: str) -> list[str]:
    rule = "=" * (len(text) + 4)
    return ["", rule, f"| {text} |", rule, ""]


async def _figlet(text: str) -> str | None:
    """Render ``text`` with figlet, or return None when it is unavailable."""
    try:
        process = await asyncio.create_subprocess_exec(
            "figlet",
            text,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError:
        return None
    stdout, _ = await process.communicate()
    if process.returncode != 0:
        return None
    return stdout.decode("utf-8", errors="replace")


def register_builtin_commands(registry: CommandRegistry) -> None:  # noqa: C901
    """Register the commands the shell runs without spawning a program."""

    command = registry.command

    @command("help", description="List built-in commands")
    def show_help(args: list[str], shell: Shell) -> None:
        shell.output.info("[cyan]Available custom commands:[/cyan]")
        for name in shell.registry.names():
            shell.output.info(f"  [green]{escape(name)}[/green]")
        shell.output.info("[cyan]\nStandard shell commands are also supported.[/cyan]")

    @command("greet", description="Print a welcome message")
    def greet(args: list[str], shell: Shell) -> None:
        shell.output.info("[yellow]Hello, welcome to my custom shell![/yellow]")

    @command("echo", description="Print the arguments")
    def echo(args: list[str], shell: Shell) -> None:
        _write_line(shell.output, " ".join(args))

    @command("clear", description="Clear the screen")
    def clear(args: list[str], shell: Shell) -> None:
        shell.output.clear()

    @command("exit", description="Save history and leave the shell")
    def exit_shell(args: list[str], shell: Shell) -> None:
        shell.request_exit()

    @command("history", description="Show recent input lines")
    def history(args: list[str], shell: Shell) -> None:
        limit: int | None = None
        if args:
            try:
                limit = int(args[0])
            except ValueError:
                raise BuiltinActionError("history", f"invalid count: {args[0]}") from None
        for number, line in shell.history.tail(limit):
            _write_line(shell.output, f"{number} {line}")

    @command("cd", description="Change the working directory")
    def change_directory(args: list[str], shell: Shell) -> None:
        target = args[0] if args else str(Path.home())
        try:
            os.chdir(Path(target).expanduser())
        except OSError as exc:
            raise BuiltinActionError("cd", _os_reason(exc, target)) from exc

    @command("pwd", description="Print the working directory")
    def print_directory(args: list[str], shell: Shell) -> None:
        _write_line(shell.output, os.getcwd())

    @command("mkdir", description="Create a directory and its parents")
    def make_directory(args: list[str], shell: Shell) -> None:
        if not args:
            raise BuiltinActionError("mkdir", "missing directory name")
        try:
            Path(args[0]).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BuiltinActionError("mkdir", _os_reason(exc, args[0])) from exc

    @command("rm", description="Remove a file, or a directory with -r")
    def remove(args: list[str], shell: Shell) -> None:
        target = _first_operand(args)
        if target is None:
            raise BuiltinActionError("rm", "missing file or directory name")
        path = Path(target)
        try:
            if RECURSIVE_FLAGS.intersection(args):
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink(missing_ok=True)
            else:
                path.unlink()
        except OSError as exc:
            raise BuiltinActionError("rm", _os_reason(exc, target)) from exc

    @command("touch", description="Create a file or update its timestamp")
    def touch(args: list[str], shell: Shell) -> None:
        if not args:
            raise BuiltinActionError("touch", "missing file name")
        try:
            Path(args[0]).touch()
        except OSError as exc:
            raise BuiltinActionError("touch", _os_reason(exc, args[0])) from exc

    @command("ls", description="List a directory")
    def list_directory(args: list[str], shell: Shell) -> None:
        target = _first_operand(args) or "."
        show_hidden = bool(HIDDEN_FLAGS.intersection(args))
        try:
            entries = sorted(Path(target).iterdir(), key=lambda path: path.name)
        except OSError as exc:
            raise BuiltinActionError("ls", _os_reason(exc, target)) from exc
        for entry in entries:
            if entry.name.startswith(".") and not show_hidden:
                continue
            name = escape(entry.name)
            if entry.is_dir():
                shell.output.info(f"[blue]{name}/[/blue]")
            elif entry.is_file() and os.access(entry, os.X_OK):
                shell.output.info(f"[green]{name}*[/green]")
            else:
                shell.output.info(name)

    @command("cat", description="Print a file")
    def cat(args: list[str], shell: Shell) -> None:
        if not args:
            raise BuiltinActionError("cat", "missing file name")
        try:
            content = Path(args[0]).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise BuiltinActionError("cat", _os_reason(exc, args[0])) from exc
        _write_line(shell.output, content)

    @command("date", description="Print the current date and time")
    def show_date(args: list[str], shell: Shell) -> None:
        _write_line(shell.output, datetime.now().astimezone().strftime("%a %b %d %Y %H:%M:%S %Z"))

    @command("alias", description="Define a command alias: alias name=command")
    def alias(args: list[str], shell: Shell) -> None:
        if not args:
            for name, command_line in shell.registry.aliases().items():
                _write_line(shell.output, f"{name}='{command_line}'")
            return
        match = ALIAS_RE.match(" ".join(args))
        if match is None:
            raise BuiltinActionError("alias", "Invalid alias format. Use: alias name=command")
        name, command_line = match.groups()
        shell.registry.alias(name, command_line)
        shell.output.info(f"[green]Alias created: {escape(name)}[/green]")

    @command("find", description="Find entries by name: find <dir> -name <pattern>")
    def find(args: list[str], shell: Shell) -> None:
        if len(args) < 2:
            raise BuiltinActionError("find", "Usage: find [path] -name [pattern]")
        if "-name" not in args or args.index("-name") == len(args) - 1:
            raise BuiltinActionError("find", "Missing name pattern")
        pattern = args[args.index("-name") + 1]
        _find(shell.output, Path(args[0]), pattern)

    @command("genpass", description="Generate a random password")
    def generate_password(args: list[str], shell: Shell) -> None:
        length = DEFAULT_PASSWORD_LENGTH
        if args and args[0].isdigit() and int(args[0]) > 0:
            length = int(args[0])
        password = "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
        shell.output.info(f"[green]Generated password: {escape(password)}[/green]")

    @command("banner", description="Print text as an ASCII art banner")
    async def banner(args: list[str], shell: Shell) -> None:
        text = " ".join(args) or DEFAULT_BANNER_TEXT
        shell.output.info("[yellow]Generating banner...[/yellow]")
        art = await _figlet(text)
        if art is not None:
            shell.output.info(f"[cyan]{escape(art)}[/cyan]")
            return
        for line in _boxed(text):
            _write_line(shell.output, line)
        shell.output.info("[red]For better banners, install figlet[/red]")

    @command("sysinfo", description="Show operating system and hardware details")
    def system_info(args: list[str], shell: Shell) -> None:
        memory = psutil.virtual_memory()
        uptime_hours = (time.time() - psutil.boot_time()) / 3600
        rows = [
            ("OS", f"{platform.system()} {platform.release()}"),
            ("Architecture", platform.machine()),
            ("CPU", _cpu_model()),
            ("Cores", str(psutil.cpu_count() or os.cpu_count() or "unknown")),
            ("Memory", f"{memory.total / GIB:.2f} GB"),
            ("Free Memory", f"{memory.available / GIB:.2f} GB"),
            ("Uptime", f"{uptime_hours:.2f} hours"),
        ]
        shell.output.info("[yellow]System Information:[/yellow]")
        for label, value in rows:
            shell.output.info(f"[cyan]{label}:[/cyan] {escape(value)}")

    @command("qrcode", description="Print a QR code image URL for some text")
    def qr_code(args: list[str], shell: Shell) -> None:
        data = " ".join(args)
        if not data:
            raise BuiltinActionError("qrcode", "Please provide data to encode as QR")
        url = QR_CODE_ENDPOINT + quote(data, safe="!~*'()")
        shell.output.info(f"[yellow]Creating QR code for: {escape(data)}[/yellow]")
        shell.output.info(f"[green]QR code URL: {escape(url)}[/green]")
        shell.output.info("[cyan]Open this URL in your browser to see the QR code[/cyan]")
