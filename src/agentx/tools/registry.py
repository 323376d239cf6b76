"""Tool registry system."""

from typing import Type, TYPE_CHECKING

if TYPE_CHECKING:
    from .base import BaseTool, ToolContext


class ToolRegistry:
    """
    Tool registration and lookup.

    Tool classes register once at import time, in definition order. Instances
    are created per executor because each one is bound to a ToolContext.
    """

    _tools: dict[str, Type["BaseTool"]] = {}

    @classmethod
    def register(
        cls,
        tool_class: Type["BaseTool"],
        name: str | None = None,
    ) -> Type["BaseTool"]:
        """
        Register a tool class.

        Args:
            tool_class: Tool class to register
            name: Optional tool name (uses class's name attribute if not provided)

        Returns:
            Registered tool class (for decorator chaining)
        """
        tool_name = name or tool_class.name
        if not tool_name:
            raise ValueError(f"Tool class {tool_class.__name__} must have a 'name' attribute")

        cls._tools[tool_name] = tool_class
        return tool_class

    @classmethod
    def create(cls, name: str, context: "ToolContext | None" = None) -> "BaseTool":
        """
        Create a tool instance bound to a context.

        Raises:
            KeyError: unknown tool name
        """
        return cls.get_tool_class(name)(context)

    @classmethod
    def get_tool_class(cls, name: str) -> Type["BaseTool"]:
        """Get tool class (without instantiation)."""
        if name not in cls._tools:
            raise KeyError(f"Unknown tool: {name}. Available: {list(cls._tools.keys())}")
        return cls._tools[name]

    @classmethod
    def list_tools(cls) -> list[str]:
        """Return registered tool names in registration order."""
        return list(cls._tools.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if tool is registered."""
        return name in cls._tools

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._tools.pop(name, None)


def register_tool(cls: Type["BaseTool"]) -> Type["BaseTool"]:
    """
    Tool registration decorator.

    Usage:
        @register_tool
        class ReadFileTool(BaseTool):
            name = "read_file"
            ...
    """
    return ToolRegistry.register(cls)
