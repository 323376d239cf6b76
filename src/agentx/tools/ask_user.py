"""ask_user tool - Surface a clarifying question to the caller."""

from typing import Any

from .base import BaseTool, ToolResult
from .registry import register_tool


@register_tool
class AskUserTool(BaseTool):
    """Returns the question as a follow-up. The loop stops after the current turn."""

    name = "ask_user"
    description = (
        "Ask the user a clarifying question when you need more information to proceed. "
        "Use this when the request is ambiguous or you need to confirm important decisions."
    )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "question": {
                "type": "string",
                "description": "The question to ask the user",
                "required": True,
            },
            "options": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Optional list of choices for the user",
                "required": False,
            },
        }

    async def execute(
        self,
        question: str = "",
        options: list[str] | None = None,
        **kwargs: Any,
    ) -> ToolResult:
        follow_up = str(question)
        if options:
            follow_up += f"\nOptions: {', '.join(str(o) for o in options)}"

        return ToolResult(content="Question sent to user.", follow_up=follow_up)
