"""Hook system types."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

HOOK_EVENTS = (
    "pre:generate",
    "post:generate",
    "pre:file-write",
    "post:file-write",
    "pre:prompt",
    "post:response",
    "pre:command",
    "on:error",
    "pre:tool-call",
    "post:tool-call",
)

# Events whose handlers may veto the operation
BLOCKING_EVENTS = frozenset({
    "pre:generate",
    "pre:file-write",
    "pre:prompt",
    "post:response",
    "pre:command",
    "pre:tool-call",
})

HOOK_TYPES = ("command", "script", "prompt")

DEFAULT_PRIORITY = 100
DEFAULT_TIMEOUT_MS = 60_000

# Context passed to handlers. Keys vary by event: event, tool_name, tool_input,
# tool_result, command, file, file_content, task, content, error, cwd.
HookContext = dict[str, Any]


@dataclass
class HookResult:
    """What a handler (or a whole chain) decided."""

    blocked: bool = False
    message: str | None = None
    modified: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> "HookResult":
        """Normalize a handler return value (HookResult, dict or None)."""
        if value is None:
            return cls()
        if isinstance(value, HookResult):
            return value
        if isinstance(value, dict):
            return cls(
                blocked=bool(value.get("blocked", False)),
                message=value.get("message"),
                modified=dict(value.get("modified") or {}),
            )
        raise TypeError(f"Hook handler returned unsupported value: {type(value).__name__}")


HookReturn = Union[HookResult, dict[str, Any], None]
HookHandler = Callable[[HookContext], Union[HookReturn, Awaitable[HookReturn]]]


@dataclass
class HookDefinition:
    """One configured hook."""

    name: str
    type: str
    command: str | None = None     # command hooks: shell command with {{field}} placeholders
    script: str | None = None      # script hooks: name in the script handler table
    prompt: str | None = None      # prompt hooks: template (not executed)
    priority: int = DEFAULT_PRIORITY
    enabled: bool = True
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self) -> None:
        if self.type not in HOOK_TYPES:
            raise ValueError(f"Unknown hook type: {self.type}. Available: {list(HOOK_TYPES)}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HookDefinition":
        """Build a definition from a config entry.

        Raises:
            ValueError: missing name, unknown type or a bad field type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Hook definition must be an object, got {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("Hook definition requires a 'name'")

        priority = data.get("priority", DEFAULT_PRIORITY)
        if isinstance(priority, bool) or not isinstance(priority, (int, float)):
            raise ValueError(f"Hook '{name}': priority must be a number")
        timeout_ms = data.get("timeout_ms", DEFAULT_TIMEOUT_MS)
        if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, (int, float)):
            raise ValueError(f"Hook '{name}': timeout_ms must be a number")

        return cls(
            name=name,
            type=str(data.get("type", "")),
            command=data.get("command"),
            script=data.get("script"),
            prompt=data.get("prompt"),
            priority=int(priority),
            enabled=bool(data.get("enabled", True)),
            timeout_ms=int(timeout_ms),
        )


class HookBlockedError(Exception):
    """A blocking generation-level hook vetoed the operation."""

    def __init__(self, event: str, message: str) -> None:
        super().__init__(message)
        self.event = event
        self.message = message
