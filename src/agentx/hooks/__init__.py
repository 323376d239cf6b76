"""Hooks module - interception points around generation, tools, commands and file writes."""

from .loader import load_hooks
from .registry import (
    HookRegistry,
    clear_script_handlers,
    get_hook_registry,
    get_script_handler,
    register_script_handler,
    script_handler,
    set_hook_registry,
)
from .types import (
    BLOCKING_EVENTS,
    HOOK_EVENTS,
    HOOK_TYPES,
    HookBlockedError,
    HookContext,
    HookDefinition,
    HookHandler,
    HookResult,
)

__all__ = [
    # Types
    "BLOCKING_EVENTS",
    "HOOK_EVENTS",
    "HOOK_TYPES",
    "HookBlockedError",
    "HookContext",
    "HookDefinition",
    "HookHandler",
    "HookResult",
    # Registry
    "HookRegistry",
    "get_hook_registry",
    "set_hook_registry",
    "register_script_handler",
    "script_handler",
    "get_script_handler",
    "clear_script_handlers",
    # Loader
    "load_hooks",
]
