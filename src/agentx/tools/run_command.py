"""run_command tool - Execute shell commands."""

from typing import Any

from agentx.core.console import debug
from agentx.core.process import run_shell

from .base import BaseTool, ToolResult, option_int
from .registry import register_tool

DEFAULT_TIMEOUT_MS = 30_000
MAX_OUTPUT_CHARS = 10_000


def _strip_final_newline(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


@register_tool
class RunCommandTool(BaseTool):
    """Runs a shell command in the project root, gated by the permission manager."""

    name = "run_command"
    description = (
        "Execute a shell command. Use this to run build tools, test commands, linters, "
        "or inspect the environment. Commands run in the project root directory."
    )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "command": {
                "type": "string",
                "description": "The shell command to execute",
                "required": True,
            },
            "timeout": {
                "type": "number",
                "description": "Timeout in milliseconds. Default: 30000 (30 seconds).",
                "required": False,
            },
        }

    async def execute(
        self,
        command: str,
        timeout: int | None = None,
        **kwargs: Any,
    ) -> ToolResult:
        command = str(command)
        timeout_ms = option_int(timeout, DEFAULT_TIMEOUT_MS)
        permissions = self.context.permissions
        hooks = self.context.hooks

        permission = await permissions.check_command(command)
        if permission == "deny":
            return ToolResult(
                content=f"Command blocked by permissions (mode: {permissions.mode.value}): {command}",
                is_error=True,
            )

        if hooks.has("pre:command"):
            hook_result = await hooks.execute("pre:command", {
                "event": "pre:command",
                "command": command,
                "cwd": self.context.cwd,
            })
            if hook_result.blocked:
                return ToolResult(
                    content=hook_result.message or f"Command blocked by pre:command hook: {command}",
                    is_error=True,
                )
            command = str(hook_result.modified.get("command", command))

        debug("run_command", command)
        result = await run_shell(command, cwd=self.context.cwd, timeout=timeout_ms / 1000)
        if result.timed_out:
            return ToolResult(content=f"Command timed out after {timeout_ms} ms", is_error=True)

        streams = [_strip_final_newline(result.stdout), _strip_final_newline(result.stderr)]
        output = "\n".join(s for s in streams if s)
        if len(output) > MAX_OUTPUT_CHARS:
            output = output[:MAX_OUTPUT_CHARS] + "\n\n... (output truncated)"

        if result.returncode != 0:
            return ToolResult(
                content=f"Command exited with code {result.returncode}:\n{output}",
                is_error=True,
            )

        return ToolResult(content=output or "(no output)")
