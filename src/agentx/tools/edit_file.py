"""edit_file tool - Apply search-and-replace edits to a file."""

from pathlib import Path
from typing import Any

from .base import BaseTool, ToolResult
from .registry import register_tool


def _preview(text: str) -> str:
    return f'"{text[:40]}..."'


@register_tool
class EditFileTool(BaseTool):
    """Applies edits in order. A missing old_text is noted, not fatal."""

    name = "edit_file"
    description = (
        "Apply search-and-replace edits to an existing file. Use this for targeted "
        "modifications to existing code rather than rewriting entire files."
    )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "path": {
                "type": "string",
                "description": "Relative file path from project root",
                "required": True,
            },
            "edits": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "old_text": {
                            "type": "string",
                            "description": "The exact text to find in the file",
                        },
                        "new_text": {
                            "type": "string",
                            "description": "The replacement text",
                        },
                    },
                    "required": ["old_text", "new_text"],
                },
                "description": "List of search/replace pairs to apply in order",
                "required": True,
            },
        }

    async def execute(
        self,
        path: str,
        edits: list[dict[str, str]] | None = None,
        **kwargs: Any,
    ) -> ToolResult:
        file_path = str(path)
        abs_path = self.context.resolve(file_path)
        hooks = self.context.hooks

        if not edits:
            return ToolResult(content="No edits provided.", is_error=True)
        for edit in edits:
            if not isinstance(edit, dict) or "old_text" not in edit or "new_text" not in edit:
                return ToolResult(
                    content="Each edit needs 'old_text' and 'new_text'.", is_error=True
                )

        permission = await self.context.permissions.check_file_write(file_path)
        if permission == "deny":
            return ToolResult(
                content=f"File write blocked by permissions: {file_path}", is_error=True
            )
        if permission == "skip":
            return ToolResult(content=f"File write skipped (plan mode): {file_path}")

        if hooks.has("pre:file-write"):
            hook_result = await hooks.execute("pre:file-write", {
                "event": "pre:file-write",
                "file": abs_path,
                "cwd": self.context.cwd,
            })
            if hook_result.blocked:
                return ToolResult(
                    content=hook_result.message
                    or f"File edit blocked by pre:file-write hook: {file_path}",
                    is_error=True,
                )

        target = Path(abs_path)
        content = target.read_text(encoding="utf-8")
        notes = []
        for edit in edits:
            old_text, new_text = str(edit["old_text"]), str(edit["new_text"])
            if old_text in content:
                content = content.replace(old_text, new_text, 1)
                notes.append(f"Replaced: {_preview(old_text)}")
            else:
                notes.append(f"Not found: {_preview(old_text)}")

        if self.context.dry_run:
            notes.append("(dry run, not written)")
        else:
            target.write_text(content, encoding="utf-8")

        if hooks.has("post:file-write"):
            await hooks.execute("post:file-write", {
                "event": "post:file-write",
                "file": abs_path,
                "file_content": content,
                "cwd": self.context.cwd,
            })

        return ToolResult(content=f"Edited {file_path}:\n" + "\n".join(notes))
