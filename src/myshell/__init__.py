"""myshell - a small shell with pipes, redirection and built-ins."""

from .core import CommandRegistry, Shell
from .errors import ShellError

__version__ = "0.1.0"

__all__ = ["CommandRegistry", "Shell", "ShellError"]
