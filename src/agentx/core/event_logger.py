"""Event-based logger for progress display.

Subscribes to progress events and logs them to the console.
"""

from typing import Callable

from rich.console import Console
from rich.markup import escape

from .events import (
    CompleteEvent,
    Event,
    EventBus,
    FilesCreatedEvent,
    IterationStartEvent,
    TextDeltaEvent,
    ToolCallEvent,
    ToolResultEvent,
)


class EventLogger:
    """Logs progress events to the console.

    Can be attached to an EventBus to receive and display events.
    In verbose mode text deltas are echoed as well.
    """

    def __init__(
        self,
        console: Console | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the event logger.

        Args:
            console: Rich console for output. Creates new one if not provided.
            verbose: If True, also prints the provider's text as it arrives.
        """
        self.console = console or Console(stderr=True)
        self.verbose = verbose
        self._unsubscribers: list[Callable[[], None]] = []

    def attach(self, bus: EventBus) -> None:
        """Attach to an event bus and start logging."""
        handlers: list[tuple[type[Event], Callable[[Event], None]]] = [
            (IterationStartEvent, self._on_iteration_start),  # type: ignore[list-item]
            (ToolCallEvent, self._on_tool_call),  # type: ignore[list-item]
            (ToolResultEvent, self._on_tool_result),  # type: ignore[list-item]
            (FilesCreatedEvent, self._on_files_created),  # type: ignore[list-item]
            (CompleteEvent, self._on_complete),  # type: ignore[list-item]
        ]
        if self.verbose:
            handlers.append((TextDeltaEvent, self._on_text_delta))  # type: ignore[arg-type]

        for event_type, handler in handlers:
            unsub = bus.subscribe(event_type, handler)
            self._unsubscribers.append(unsub)

    def detach(self) -> None:
        """Detach from the event bus and stop logging."""
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers.clear()

    # -------------------------------------------------------------------------
    # Event Handlers
    # -------------------------------------------------------------------------

    def _on_iteration_start(self, event: IterationStartEvent) -> None:
        self.console.print(f"[dim]{'─' * 60}[/dim]")
        self.console.print(f"[dim]\\[ITERATION {event.iteration}][/dim]")

    def _on_tool_call(self, event: ToolCallEvent) -> None:
        target = event.input.get("path") or event.input.get("command") or event.input.get("pattern") or ""
        suffix = f" {escape(str(target))}" if target else ""
        self.console.print(f"[dim]  ▶ {event.name}{suffix}[/dim]")

    def _on_tool_result(self, event: ToolResultEvent) -> None:
        status = "✗" if event.is_error else "✓"
        first_line = event.content.splitlines()[0] if event.content else ""
        self.console.print(f"[dim]  {status} {event.name}: {escape(first_line[:80])}[/dim]")

    def _on_text_delta(self, event: TextDeltaEvent) -> None:
        self.console.print(escape(event.text), end="")

    def _on_files_created(self, event: FilesCreatedEvent) -> None:
        for f in event.files:
            self.console.print(f"[green]  + {escape(f.path)}[/green]")

    def _on_complete(self, event: CompleteEvent) -> None:
        self.console.print(
            f"[dim]Done: {event.iterations} iteration(s), {event.total_tokens:,} tokens[/dim]"
        )
