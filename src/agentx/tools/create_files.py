"""create_files tool - Hand generated files back to the caller."""

from typing import Any

from .base import BaseTool, GeneratedFile, ToolResult
from .registry import register_tool


@register_tool
class CreateFilesTool(BaseTool):
    """Collects files; persisting them is the caller's job."""

    name = "create_files"
    description = (
        "Create one or more files as output. Use this when you need to generate code, "
        "documents, configs, or any file-based output."
    )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "files": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "path": {
                            "type": "string",
                            "description": (
                                "Relative file path from project root "
                                "(e.g., src/components/Button.tsx)"
                            ),
                        },
                        "content": {
                            "type": "string",
                            "description": "The full content of the file",
                        },
                        "language": {
                            "type": "string",
                            "description": "Programming language or file type",
                        },
                        "description": {
                            "type": "string",
                            "description": "Brief description of what this file does",
                        },
                    },
                    "required": ["path", "content"],
                },
                "required": True,
            },
            "summary": {
                "type": "string",
                "description": "Brief summary of all generated files",
                "required": False,
            },
        }

    async def execute(
        self,
        files: list[dict[str, Any]] | None = None,
        summary: str | None = None,
        **kwargs: Any,
    ) -> ToolResult:
        generated = [GeneratedFile.from_dict(f) for f in files or []]
        return ToolResult(
            content=summary or f"Queued {len(generated)} file(s) for creation.",
            files=generated,
        )
