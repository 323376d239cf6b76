"""read_file tool - Read file contents."""

from pathlib import Path
from typing import Any

from .base import BaseTool, ToolResult, option_int
from .registry import register_tool

DEFAULT_MAX_LINES = 500


@register_tool
class ReadFileTool(BaseTool):
    """Reads a file, capped at ``max_lines`` lines."""

    name = "read_file"
    description = (
        "Read the contents of a file. Use this to inspect existing code, understand patterns, "
        "check implementations, or gather context before generating code."
    )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "path": {
                "type": "string",
                "description": "Relative file path from project root",
                "required": True,
            },
            "max_lines": {
                "type": "number",
                "description": "Maximum number of lines to read. Defaults to 500. Use for large files.",
                "required": False,
            },
        }

    async def execute(
        self,
        path: str,
        max_lines: int | None = None,
        **kwargs: Any,
    ) -> ToolResult:
        limit = option_int(max_lines, DEFAULT_MAX_LINES)
        content = Path(self.context.resolve(str(path))).read_text(encoding="utf-8")

        lines = content.splitlines()
        if len(lines) <= limit:
            return ToolResult(content=content)

        remaining = len(lines) - limit
        return ToolResult(
            content="\n".join(lines[:limit]) + f"\n\n... (truncated, {remaining} more lines)"
        )
