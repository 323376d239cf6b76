"""Tools module - file reading, search, listing, shell commands, edits, file output and questions."""

# Import registry first
from .registry import ToolRegistry, register_tool

# Import base classes
from .base import BaseTool, GeneratedFile, ToolCall, ToolContext, ToolResult

# Import all tools (this triggers @register_tool decorators, in schema order)
from .create_files import CreateFilesTool
from .ask_user import AskUserTool
from .read_file import ReadFileTool
from .search_files import SearchFilesTool
from .list_directory import ListDirectoryTool
from .run_command import RunCommandTool
from .edit_file import EditFileTool

from .definitions import (
    ALL_TOOL_NAMES,
    LEGACY_TOOL_NAMES,
    format_tools_for_system_prompt,
    get_anthropic_tools,
    get_legacy_tools,
)

__all__ = [
    # Registry
    "ToolRegistry",
    "register_tool",
    # Base
    "BaseTool",
    "GeneratedFile",
    "ToolCall",
    "ToolContext",
    "ToolResult",
    # Tools
    "AskUserTool",
    "CreateFilesTool",
    "EditFileTool",
    "ListDirectoryTool",
    "ReadFileTool",
    "RunCommandTool",
    "SearchFilesTool",
    # Schemas
    "ALL_TOOL_NAMES",
    "LEGACY_TOOL_NAMES",
    "format_tools_for_system_prompt",
    "get_anthropic_tools",
    "get_legacy_tools",
    "get_all_tools",
]


def get_all_tools(
    context: ToolContext | None = None,
    enabled_tools: list[str] | None = None,
) -> list[BaseTool]:
    """
    Get tool instances bound to a context.

    Args:
        context: Shared tool context (process-wide defaults if None)
        enabled_tools: Names to include (all tools if None)

    Returns:
        List of tool instances, in schema order.
    """
    context = context or ToolContext.default()
    names = ALL_TOOL_NAMES if enabled_tools is None else [
        name for name in ALL_TOOL_NAMES if name in enabled_tools
    ]
    return [ToolRegistry.create(name, context) for name in names]
