"""Tool schemas in Anthropic tool_use format.

Tool names and required fields are a wire contract: they appear in stored
prompt and tool-use history, so they must not change.
"""

from typing import Any, Iterable

from .base import BaseTool, ToolContext
from .registry import ToolRegistry

ALL_TOOL_NAMES = (
    "create_files",
    "ask_user",
    "read_file",
    "search_files",
    "list_directory",
    "run_command",
    "edit_file",
)

# Tools a text-only provider handles itself
LEGACY_TOOL_NAMES = ("create_files", "ask_user")


def _schema_tools() -> list[BaseTool]:
    # Schemas never touch the context, so a placeholder is enough
    context = ToolContext(cwd=".", permissions=None, hooks=None)  # type: ignore[arg-type]
    return [ToolRegistry.create(name, context) for name in ALL_TOOL_NAMES]


def get_anthropic_tools(enabled_tools: Iterable[str] | None = None) -> list[dict[str, Any]]:
    """
    Tool schemas for a raw provider call.

    Args:
        enabled_tools: Names to include (all tools if None). Order follows ALL_TOOL_NAMES.
    """
    enabled = set(enabled_tools) if enabled_tools is not None else None
    return [
        tool.to_anthropic_tool()
        for tool in _schema_tools()
        if enabled is None or tool.name in enabled
    ]


def get_legacy_tools() -> list[dict[str, Any]]:
    """The create_files and ask_user schemas."""
    return get_anthropic_tools(LEGACY_TOOL_NAMES)


def format_tools_for_system_prompt() -> str:
    """Describe the non-legacy tools as text for a text-only provider's system prompt."""
    tools = [t for t in _schema_tools() if t.name not in LEGACY_TOOL_NAMES]
    if not tools:
        return ""

    lines = [
        "# Available Capabilities",
        "In addition to generating files, you have the following capabilities:",
        "",
    ]
    for tool in tools:
        lines.append(f"## {tool.name}")
        lines.append(tool.description)
        lines.append("")

    return "\n".join(lines)
