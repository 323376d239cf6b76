"""Hook Registry - registration, priority ordering and execution.

Handlers for an event run in ascending priority (lower runs first); equal
priorities keep registration order. ``modified`` values from each handler are
merged into the context seen by the next one. On a blocking event the first
handler that blocks ends the chain, and a handler that raises counts as a
block. On other events failures are logged and the chain continues.
"""

import inspect
import json
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Callable

from agentx.core.console import debug, warn
from agentx.core.process import run_shell

from .types import (
    BLOCKING_EVENTS,
    HOOK_EVENTS,
    DEFAULT_PRIORITY,
    HookContext,
    HookDefinition,
    HookHandler,
    HookResult,
)

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

# Script handler table: name -> handler, filled before the run starts
_script_handlers: dict[str, HookHandler] = {}


def register_script_handler(name: str, handler: HookHandler) -> None:
    """Make ``handler`` available to ``script`` hook definitions as ``name``."""
    _script_handlers[name] = handler


def script_handler(name: str) -> Callable[[HookHandler], HookHandler]:
    """
    Script handler registration decorator.

    Usage:
        @script_handler("format-on-write")
        def format_on_write(context):
            ...
    """

    def decorator(fn: HookHandler) -> HookHandler:
        register_script_handler(name, fn)
        return fn

    return decorator


def get_script_handler(name: str) -> HookHandler:
    if name not in _script_handlers:
        raise ValueError(
            f"Unknown script hook handler: {name}. Available: {sorted(_script_handlers)}"
        )
    return _script_handlers[name]


def clear_script_handlers() -> None:
    """Clear the script handler table (for testing)."""
    _script_handlers.clear()


def _interpolate(template: str, context: HookContext) -> str:
    def replace(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return str(value)

    return _PLACEHOLDER.sub(replace, template)


@dataclass
class RegisteredHook:
    event: str
    definition: HookDefinition
    handler: HookHandler


class HookRegistry:
    """Holds hooks per event and runs them."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[RegisteredHook]] = {}

    @staticmethod
    def _check_event(event: str) -> None:
        if event not in HOOK_EVENTS:
            raise ValueError(f"Unknown hook event: {event}. Available: {list(HOOK_EVENTS)}")

    def register(self, event: str, definition: HookDefinition) -> None:
        """Register a hook definition for an event. Disabled definitions are ignored.

        Raises:
            ValueError: unknown event, or a script name missing from the handler table
        """
        self._check_event(event)
        if not definition.enabled:
            return
        self._add(RegisteredHook(event, definition, self._create_handler(definition)))

    def register_handler(
        self,
        event: str,
        name: str,
        handler: HookHandler,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        """Register an in-process handler function for an event."""
        self._check_event(event)
        definition = HookDefinition(name=name, type="script", script=name, priority=priority)
        self._add(RegisteredHook(event, definition, handler))

    def _add(self, hook: RegisteredHook) -> None:
        hooks = self._hooks.setdefault(hook.event, [])
        hooks.append(hook)
        # list.sort is stable: equal priorities keep registration order
        hooks.sort(key=lambda h: h.definition.priority)

    async def execute(self, event: str, context: HookContext) -> HookResult:
        """Run every hook registered for ``event`` and return the combined result."""
        self._check_event(event)
        registered = self._hooks.get(event)
        if not registered:
            return HookResult()

        can_block = event in BLOCKING_EVENTS
        combined: dict[str, Any] = {}

        for hook in list(registered):
            name = hook.definition.name
            start = time.perf_counter()
            try:
                value = hook.handler({**context, **combined})
                if inspect.isawaitable(value):
                    value = await value
                result = HookResult.from_value(value)
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                debug("hook", f"{event} {name} ({elapsed:.0f}ms) error: {e}")
                warn(f'Hook "{name}" failed: {e}')
                if can_block:
                    return HookResult(
                        blocked=True,
                        message=f'Hook "{name}" errored: {e}',
                        modified=combined,
                    )
                continue

            elapsed = (time.perf_counter() - start) * 1000
            combined.update(result.modified)

            if can_block and result.blocked:
                debug("hook", f"{event} {name} ({elapsed:.0f}ms) blocked")
                return HookResult(
                    blocked=True,
                    message=result.message or f"Blocked by hook: {name}",
                    modified=combined,
                )
            debug("hook", f"{event} {name} ({elapsed:.0f}ms) ok")

        return HookResult(modified=combined)

    def has(self, event: str) -> bool:
        """Check if any hooks are registered for an event."""
        return bool(self._hooks.get(event))

    def list_hooks(self, event: str) -> list[str]:
        """Hook names for an event, in execution order."""
        return [h.definition.name for h in self._hooks.get(event, [])]

    def clear(self) -> None:
        """Clear all hooks (for testing)."""
        self._hooks.clear()

    def _create_handler(self, definition: HookDefinition) -> HookHandler:
        if definition.type == "command":
            return self._command_handler(definition)
        if definition.type == "script":
            return get_script_handler(definition.script or definition.name)
        return self._prompt_handler(definition)

    @staticmethod
    def _command_handler(definition: HookDefinition) -> HookHandler:
        async def run(context: HookContext) -> HookResult:
            if not definition.command:
                return HookResult()

            command = _interpolate(definition.command, context)
            result = await run_shell(
                command,
                cwd=context.get("cwd") or os.getcwd(),
                timeout=definition.timeout_ms / 1000,
            )
            if result.timed_out:
                return HookResult(
                    blocked=True,
                    message=f'Command hook "{definition.name}" timed out after {definition.timeout_ms} ms',
                )
            if result.returncode != 0:
                message = (
                    result.stderr.strip()
                    or result.stdout.strip()
                    or f'Command hook "{definition.name}" failed'
                )
                return HookResult(blocked=True, message=message)
            return HookResult()

        return run

    @staticmethod
    def _prompt_handler(definition: HookDefinition) -> HookHandler:
        def run(context: HookContext) -> HookResult:
            warn(
                f'Prompt hook "{definition.name}" registered but prompt hooks require '
                "a provider. Skipping."
            )
            return HookResult()

        return run


_default_registry: HookRegistry | None = None


def get_hook_registry() -> HookRegistry:
    """Get the process-wide hook registry (created on first call)."""
    global _default_registry
    if _default_registry is None:
        _default_registry = HookRegistry()
    return _default_registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Replace the process-wide hook registry."""
    global _default_registry
    _default_registry = registry
