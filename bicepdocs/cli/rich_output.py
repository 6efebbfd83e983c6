"""
Rich terminal output utilities for the bicep-docs CLI.

Status lines go to stdout and errors to stderr; with rich formatting disabled
the same messages are printed as plain text.
"""

from rich.console import Console
from rich.markup import escape


class RichOutputManager:
    """Manages rich terminal output with a plain-text mode."""

    def __init__(self, use_rich: bool = True):
        """Initialize the output manager."""
        self.use_rich = use_rich
        self.console = Console(highlight=False, no_color=not use_rich, soft_wrap=True)
        self.error_console = Console(
            stderr=True, highlight=False, no_color=not use_rich, soft_wrap=True
        )

    def _emit(self, console: Console, symbol: str, style: str, message: str) -> None:
        if self.use_rich:
            console.print(f"[{style}]{symbol}[/{style}] {escape(message)}")
        else:
            console.print(message, markup=False)

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self._emit(self.console, "✓", "green", message)

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self._emit(self.console, "ℹ", "blue", message)

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self._emit(self.error_console, "⚠", "yellow", message)

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self._emit(self.error_console, "✗", "red", message)
