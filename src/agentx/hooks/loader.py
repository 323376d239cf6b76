"""Hook loader - register hooks from configuration.

Config shape (``hooks`` key)::

    {
        "pre:file-write": [
            {"name": "lint", "type": "command", "command": "ruff check {{file}}", "priority": 10}
        ],
        "post:generate": [
            {"name": "notify", "type": "script", "script": "notify"}
        ]
    }
"""

from typing import TYPE_CHECKING, Any

from agentx.core.console import debug, warn

from .registry import HookRegistry, get_hook_registry
from .types import HOOK_EVENTS, HookDefinition

if TYPE_CHECKING:
    from agentx.config import Config


def load_hooks(config: "Config | dict[str, Any]", registry: HookRegistry | None = None) -> int:
    """
    Register the hooks declared under the ``hooks`` config key.

    Unknown events and invalid definitions are skipped with a warning.

    Args:
        config: Config instance or plain dict
        registry: Target registry (defaults to the process-wide one)

    Returns:
        Number of hooks registered
    """
    registry = registry or get_hook_registry()
    hooks = config.get("hooks") or {}
    if not isinstance(hooks, dict):
        warn("Config 'hooks' must be an object mapping events to hook lists")
        return 0

    count = 0
    for event, definitions in hooks.items():
        if event not in HOOK_EVENTS:
            warn(f"Unknown hook event in config: {event}")
            continue
        if not isinstance(definitions, list):
            warn(f"Hooks for {event} must be a list")
            continue

        for raw in definitions:
            try:
                definition = HookDefinition.from_dict(raw)
                registry.register(event, definition)
            except ValueError as e:
                warn(f"Invalid hook definition for {event}: {e}")
                continue
            if definition.enabled:
                count += 1
                debug("hooks", f"registered {definition.type} hook {definition.name} on {event}")

    return count
