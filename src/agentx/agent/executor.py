"""Tool executor - Runs tool calls from the model.

Never raises to its caller: unknown tools, bad input and tool failures all
come back as ``is_error`` results so the model can see and correct them.
Every call is framed by the pre:tool-call / post:tool-call hooks.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from agentx.core.console import debug
from agentx.hooks import HookRegistry, get_hook_registry
from agentx.tools import BaseTool, ToolCall, ToolContext, ToolResult, get_all_tools

from .permissions import get_permission_manager

if TYPE_CHECKING:
    from .permissions import PermissionManager


class ToolExecutor:
    """Executes tools by name against the working directory."""

    def __init__(
        self,
        cwd: str | None = None,
        permission_manager: PermissionManager | None = None,
        hook_registry: HookRegistry | None = None,
        dry_run: bool = False,
        enabled_tools: list[str] | None = None,
        tools: list[BaseTool] | None = None,
    ) -> None:
        """
        Initialize tool executor.

        Args:
            cwd: Working directory tools run against (defaults to the process cwd)
            permission_manager: Write/command policy (defaults to the process-wide one)
            hook_registry: Hooks (defaults to the process-wide registry)
            dry_run: Compute edits without writing them
            enabled_tools: Names of the tools to offer (all tools if None)
            tools: Pre-built tool instances; overrides ``enabled_tools``
        """
        self.context = ToolContext.default(cwd=cwd, dry_run=dry_run)
        if permission_manager is not None:
            self.context.permissions = permission_manager
        if hook_registry is not None:
            self.context.hooks = hook_registry

        tool_list = tools if tools is not None else get_all_tools(self.context, enabled_tools)
        self.tools: dict[str, BaseTool] = {tool.name: tool for tool in tool_list}

    @property
    def cwd(self) -> str:
        return self.context.cwd

    @property
    def permission_manager(self) -> PermissionManager:
        return self.context.permissions

    @property
    def hook_registry(self) -> HookRegistry:
        return self.context.hooks

    def get_tool_definitions(self) -> list[dict[str, Any]]:
        """Get tool definitions for Anthropic API."""
        return [tool.to_anthropic_tool() for tool in self.tools.values()]

    async def execute_async(self, call: ToolCall) -> ToolResult:
        """Execute one tool call (async version)."""
        debug("tool-executor", f"executing: {call.name}")
        hooks = self.hook_registry
        tool_input = dict(call.input)

        if hooks.has("pre:tool-call"):
            hook_result = await hooks.execute("pre:tool-call", {
                "event": "pre:tool-call",
                "tool_name": call.name,
                "tool_input": tool_input,
                "cwd": self.cwd,
            })
            if hook_result.blocked:
                return ToolResult(
                    content=hook_result.message or f"Tool {call.name} blocked by pre:tool-call hook",
                    is_error=True,
                    tool_use_id=call.id,
                )
            rewritten = hook_result.modified.get("tool_input")
            if isinstance(rewritten, dict):
                tool_input = dict(rewritten)

        result = await self._dispatch(call.name, tool_input)
        result.tool_use_id = call.id

        if hooks.has("post:tool-call"):
            await hooks.execute("post:tool-call", {
                "event": "post:tool-call",
                "tool_name": call.name,
                "tool_input": tool_input,
                "tool_result": result.content,
                "cwd": self.cwd,
            })

        return result

    async def _dispatch(self, tool_name: str, tool_input: dict[str, Any]) -> ToolResult:
        tool = self.tools.get(tool_name)
        if tool is None:
            return ToolResult(content=f"Unknown tool: {tool_name}", is_error=True)

        missing = [name for name in tool.required_params if name not in tool_input]
        if missing:
            provided = ", ".join(tool_input) or "(none)"
            return ToolResult(
                content=(
                    f"Missing required parameter(s) for {tool_name}: {', '.join(missing)}. "
                    f"Provided: {provided}"
                ),
                is_error=True,
            )

        try:
            return await tool.execute(**tool_input)
        except Exception as e:
            debug("tool-executor", f"{tool_name} failed: {e}")
            return ToolResult(content=f"Error executing {tool_name}: {e}", is_error=True)

    def execute(self, call: ToolCall) -> ToolResult:
        """Execute one tool call (sync wrapper, for use outside an event loop)."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.execute_async(call))
        raise RuntimeError("ToolExecutor.execute() called inside a running event loop; use execute_async()")
