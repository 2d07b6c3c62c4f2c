"""CLI renderer for myshell."""

from datetime import UTC, datetime

from rich.console import Console
from rich.markup import escape

ERROR_STYLE_START = "\x1b[31m"
ERROR_STYLE_END = "\x1b[0m"


class Renderer:
    """Terminal output using Rich.

    ``write`` and ``write_error`` bypass Rich's text pipeline so program output
    keeps its control characters (``\\r``, backspace, bell); the other methods
    render rich markup.
    """

    def __init__(self, console: Console | None = None, error_console: Console | None = None) -> None:
        self.console: Console = console or Console(highlight=False)
        self.error_console: Console = error_console or Console(stderr=True, highlight=False)

    def write(self, text: str) -> None:
        stream = self.console.file
        stream.write(text)
        stream.flush()

    def write_error(self, text: str) -> None:
        stream = self.error_console.file
        if self.error_console.is_terminal and not self.error_console.no_color:
            text = f"{ERROR_STYLE_START}{text}{ERROR_STYLE_END}"
        stream.write(text)
        stream.flush()

    def info(self, message: str) -> None:
        """Render an info message."""
        self.console.print(message)

    def warning(self, message: str) -> None:
        """Render a warning message."""
        self.error_console.print(f"[yellow]{escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        """Render an error message."""
        self.error_console.print(message, style="red", markup=False, highlight=False)

    def clear(self) -> None:
        self.console.clear()

    def welcome(self) -> None:
        """Render welcome message."""
        self.info("[cyan]Welcome to Enhanced Shell![/cyan]")
        self.info('[cyan]Type "help" to see available commands.[/cyan]')

    def timestamp(self) -> None:
        self.info(f"[bright_black]{escape(f'[{datetime.now(UTC).isoformat()}]')}[/bright_black]")

    def goodbye(self) -> None:
        self.info("[yellow]Goodbye![/yellow]")


def create_cli_renderer() -> Renderer:
    """Create and return a Renderer instance."""
    return Renderer()
