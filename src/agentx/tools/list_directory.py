"""list_directory tool - List directory entries."""

import os
from typing import Any

from .base import BaseTool, ToolResult, option_int
from .registry import register_tool
from .search_files import is_excluded

DEFAULT_MAX_DEPTH = 3


@register_tool
class ListDirectoryTool(BaseTool):
    """Lists a directory. Directories end with "/"."""

    name = "list_directory"
    description = (
        "List files and directories at a given path. Use this to explore project structure."
    )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "path": {
                "type": "string",
                "description": "Relative directory path from project root. Defaults to '.' (root).",
                "required": False,
            },
            "recursive": {
                "type": "boolean",
                "description": "List recursively. Default: false.",
                "required": False,
            },
            "max_depth": {
                "type": "number",
                "description": "Maximum depth for recursive listing. Default: 3.",
                "required": False,
            },
        }

    async def execute(
        self,
        path: str | None = None,
        recursive: bool = False,
        max_depth: int | None = None,
        **kwargs: Any,
    ) -> ToolResult:
        root = self.context.resolve(str(path or "."))

        if recursive:
            entries = sorted(_walk(root, "", 1, option_int(max_depth, DEFAULT_MAX_DEPTH)))
        else:
            with os.scandir(root) as it:
                entries = sorted(f"{e.name}/" if e.is_dir() else e.name for e in it)

        return ToolResult(content="\n".join(entries) if entries else "Empty directory.")


def _walk(directory: str, prefix: str, depth: int, max_depth: int) -> list[str]:
    """Relative entries up to ``max_depth`` levels deep, skipping excluded paths."""
    entries: list[str] = []
    with os.scandir(directory) as it:
        for entry in it:
            relative = f"{prefix}{entry.name}"
            if is_excluded(relative):
                continue
            if entry.is_dir():
                entries.append(f"{relative}/")
                if depth < max_depth:
                    entries.extend(_walk(entry.path, f"{relative}/", depth + 1, max_depth))
            else:
                entries.append(relative)
    return entries
