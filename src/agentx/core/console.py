"""Console logging helpers.

A single stderr console is shared by every module. Debug lines are only
printed when debug mode is on; warnings are always printed.
"""

from rich.console import Console
from rich.markup import escape

# Shared stderr console
_console = Console(stderr=True)
_debug_enabled = False


def get_console() -> Console:
    """Return the shared stderr console."""
    return _console


def set_debug(enabled: bool) -> None:
    """Enable or disable debug output."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug() -> bool:
    return _debug_enabled


def debug(scope: str, message: str) -> None:
    """Print a dim debug line tagged with a scope (e.g. "permissions")."""
    if _debug_enabled:
        _console.print(f"[dim]\\[{scope}] {escape(message)}[/dim]")


def warn(message: str) -> None:
    """Print a warning."""
    _console.print(f"[yellow][WARN][/yellow] {escape(message)}")
