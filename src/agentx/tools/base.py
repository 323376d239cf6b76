"""Base class and data types for all tools."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from agentx.agent.permissions import PermissionManager
    from agentx.hooks import HookRegistry


@dataclass
class GeneratedFile:
    """A file the model asked to create. Collected only, never written by tools."""

    path: str
    content: str
    language: str | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneratedFile":
        if not isinstance(data, dict) or "path" not in data or "content" not in data:
            raise ValueError("Each file needs 'path' and 'content'")
        return cls(
            path=str(data["path"]),
            content=str(data["content"]),
            language=data.get("language"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "content": self.content}
        if self.language is not None:
            data["language"] = self.language
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class ToolCall:
    """Normalized tool call, independent of the provider wire format."""

    name: str
    id: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResult:
    """Result returned by a tool execution.

    ``files`` and ``follow_up`` are side channels filled only by create_files
    and ask_user.
    """

    content: str
    is_error: bool = False
    tool_use_id: str = ""
    files: list[GeneratedFile] = field(default_factory=list)
    follow_up: str | None = None


@dataclass
class ToolContext:
    """What a tool may touch: the working directory and the policy objects."""

    cwd: str
    permissions: "PermissionManager"
    hooks: "HookRegistry"
    dry_run: bool = False

    @classmethod
    def default(cls, cwd: str | None = None, dry_run: bool = False) -> "ToolContext":
        """Context using the process-wide permission manager and hook registry."""
        from agentx.agent.permissions import get_permission_manager
        from agentx.hooks import get_hook_registry

        return cls(
            cwd=cwd or os.getcwd(),
            permissions=get_permission_manager(),
            hooks=get_hook_registry(),
            dry_run=dry_run,
        )

    def resolve(self, path: str) -> str:
        """Absolute, normalized path for ``path`` relative to ``cwd``."""
        return os.path.normpath(os.path.join(self.cwd, path))


def option_int(value: Any, default: int) -> int:
    """Numeric tool option; missing, non-positive or non-numeric values give ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class BaseTool(ABC):
    """Abstract base class for all tools."""

    name: str = ""
    description: str = ""

    def __init__(self, context: ToolContext | None = None) -> None:
        self._context = context

    @property
    def context(self) -> ToolContext:
        if self._context is None:
            self._context = ToolContext.default()
        return self._context

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for tool parameters."""
        pass

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with given parameters."""
        pass

    @property
    def required_params(self) -> list[str]:
        return [key for key, value in self.parameters.items() if value.get("required", False)]

    def to_anthropic_tool(self) -> dict[str, Any]:
        """Convert to Anthropic API tool format."""
        # Clean properties - remove 'required' key from each property
        clean_properties = {}
        for key, value in self.parameters.items():
            clean_properties[key] = {k: v for k, v in value.items() if k != "required"}

        return {
            "name": self.name,
            "description": self.description,
            "input_schema": {
                "type": "object",
                "properties": clean_properties,
                "required": self.required_params,
            },
        }
