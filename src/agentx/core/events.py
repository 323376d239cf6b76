"""Progress events and event bus.

The orchestrator reports progress through a single callback that receives
one of the event dataclasses below. An EventBus can be plugged in as that
callback to fan events out to several subscribers.
"""

from abc import ABC
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, ClassVar, TypeVar

from .console import warn

if TYPE_CHECKING:
    from agentx.tools.base import GeneratedFile

# Type aliases
EventHandler = Callable[["Event"], None]
ProgressCallback = Callable[["Event"], None]
T = TypeVar("T", bound="Event")


# =============================================================================
# Base Event Class
# =============================================================================


@dataclass
class Event(ABC):
    """Base class for all progress events."""

    type: ClassVar[str] = "event"

    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def event_type(self) -> str:
        """Return the event type name (class name)."""
        return self.__class__.__name__


# =============================================================================
# Progress Events
# =============================================================================


@dataclass
class IterationStartEvent(Event):
    """Emitted before each provider call."""

    type: ClassVar[str] = "iteration_start"

    iteration: int = 0


@dataclass
class ToolCallEvent(Event):
    """Emitted before a tool call is dispatched."""

    type: ClassVar[str] = "tool_call"

    name: str = ""
    id: str = ""
    input: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResultEvent(Event):
    """Emitted after a tool call returns."""

    type: ClassVar[str] = "tool_result"

    name: str = ""
    id: str = ""
    content: str = ""  # First 200 characters
    is_error: bool = False


@dataclass
class TextDeltaEvent(Event):
    """Emitted for every text block the provider returns."""

    type: ClassVar[str] = "text_delta"

    text: str = ""


@dataclass
class FilesCreatedEvent(Event):
    """Emitted when a tool call produced files."""

    type: ClassVar[str] = "files_created"

    files: list["GeneratedFile"] = field(default_factory=list)


@dataclass
class CompleteEvent(Event):
    """Emitted once when a run finishes."""

    type: ClassVar[str] = "complete"

    iterations: int = 0
    total_tokens: int = 0


# =============================================================================
# EventBus
# =============================================================================


class EventBus:
    """Simple synchronous event bus.

    Supports subscribing to specific event types or all events.
    Handlers are called synchronously in subscription order.
    Handler errors are caught and logged but don't affect other handlers.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []

    def subscribe(
        self,
        event_type: type[T],
        handler: Callable[[T], None],
    ) -> Callable[[], None]:
        """Subscribe to a specific event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callback function that receives the event

        Returns:
            Unsubscribe function - call to remove the subscription
        """
        self._handlers[event_type].append(handler)  # type: ignore[arg-type]

        def unsubscribe() -> None:
            try:
                self._handlers[event_type].remove(handler)  # type: ignore[arg-type]
            except ValueError:
                pass  # Already removed

        return unsubscribe

    def subscribe_all(self, handler: EventHandler) -> Callable[[], None]:
        """Subscribe to all events."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            try:
                self._global_handlers.remove(handler)
            except ValueError:
                pass  # Already removed

        return unsubscribe

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribers.

        Type-specific handlers are called first, then global handlers.
        """
        for handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
            except Exception as e:
                warn(f"[EventBus] Handler error for {event.event_type}: {e}")

        for handler in list(self._global_handlers):
            try:
                handler(event)
            except Exception as e:
                warn(f"[EventBus] Global handler error for {event.event_type}: {e}")

    def clear(self) -> None:
        """Clear all subscriptions."""
        self._handlers.clear()
        self._global_handlers.clear()
