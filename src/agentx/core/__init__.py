"""Core components package.

Progress events, the event bus, the callback-to-stream bridge and console
logging helpers used across the application.
"""

from .bridge import EventQueue, QueueItem
from .console import debug, get_console, is_debug, set_debug, warn
from .event_logger import EventLogger
from .process import ShellResult, run_shell
from .events import (
    # Base
    Event,
    EventBus,
    EventHandler,
    ProgressCallback,
    # Progress events
    IterationStartEvent,
    ToolCallEvent,
    ToolResultEvent,
    TextDeltaEvent,
    FilesCreatedEvent,
    CompleteEvent,
)

__all__ = [
    # Bridge
    "EventQueue",
    "QueueItem",
    # Console
    "debug",
    "get_console",
    "is_debug",
    "set_debug",
    "warn",
    # Events
    "Event",
    "EventBus",
    "EventHandler",
    "ProgressCallback",
    "IterationStartEvent",
    "ToolCallEvent",
    "ToolResultEvent",
    "TextDeltaEvent",
    "FilesCreatedEvent",
    "CompleteEvent",
    # Logger
    "EventLogger",
    # Process
    "ShellResult",
    "run_shell",
]
