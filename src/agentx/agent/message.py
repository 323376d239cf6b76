"""Content blocks.

A message's content is either plain text or an ordered list of blocks:
text, tool_use (a request from the model) and tool_result (our answer).
The classes convert to and from the provider wire format.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal


class MessagePart(ABC):
    """Base class for content blocks."""

    @property
    @abstractmethod
    def part_type(self) -> str:
        """Wire type tag ("text", "tool_use", "tool_result")."""

    @abstractmethod
    def to_api_format(self) -> dict[str, Any]:
        """Convert to the provider wire format."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Convert to a serializable dict."""

    @classmethod
    @abstractmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessagePart":
        """Restore from ``to_dict`` output."""


@dataclass(frozen=True)
class TextPart(MessagePart):
    """Plain text block."""

    text: str

    @property
    def part_type(self) -> Literal["text"]:
        return "text"

    def to_api_format(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}

    def to_dict(self) -> dict[str, Any]:
        return {"part_type": "text", "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TextPart":
        return cls(text=data["text"])


@dataclass(frozen=True)
class ToolUsePart(MessagePart):
    """A tool call requested by the model."""

    tool_id: str
    tool_name: str
    tool_input: dict[str, Any] = field(default_factory=dict)

    @property
    def part_type(self) -> Literal["tool_use"]:
        return "tool_use"

    def to_api_format(self) -> dict[str, Any]:
        return {
            "type": "tool_use",
            "id": self.tool_id,
            "name": self.tool_name,
            "input": self.tool_input,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "part_type": "tool_use",
            "tool_id": self.tool_id,
            "tool_name": self.tool_name,
            "tool_input": self.tool_input,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolUsePart":
        return cls(
            tool_id=data["tool_id"],
            tool_name=data["tool_name"],
            tool_input=data.get("tool_input", {}),
        )


@dataclass(frozen=True)
class ToolResultPart(MessagePart):
    """The answer to one tool_use block, matched by ``tool_use_id``."""

    tool_use_id: str
    content: str
    is_error: bool = False

    @property
    def part_type(self) -> Literal["tool_result"]:
        return "tool_result"

    def to_api_format(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
        }
        if self.is_error:
            result["is_error"] = True
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "part_type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
            "is_error": self.is_error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolResultPart":
        return cls(
            tool_use_id=data["tool_use_id"],
            content=data["content"],
            is_error=data.get("is_error", False),
        )


_PART_TYPES: dict[str, type[MessagePart]] = {
    "text": TextPart,
    "tool_use": ToolUsePart,
    "tool_result": ToolResultPart,
}


def part_from_dict(data: dict[str, Any]) -> MessagePart:
    """Build the right part from a ``to_dict`` payload.

    Raises:
        ValueError: unknown part_type
    """
    part_type = data.get("part_type")
    if part_type not in _PART_TYPES:
        raise ValueError(f"Unknown part type: {part_type}")
    return _PART_TYPES[part_type].from_dict(data)


def part_from_anthropic(block: Any) -> MessagePart:
    """Convert an SDK block (TextBlock, ToolUseBlock) or a wire dict to a part.

    Raises:
        ValueError: the block cannot be converted
    """
    if isinstance(block, MessagePart):
        return block

    if isinstance(block, dict):
        block_type = block.get("type")
        if block_type == "text":
            return TextPart(text=block.get("text", ""))
        if block_type == "tool_use":
            return ToolUsePart(
                tool_id=block["id"],
                tool_name=block["name"],
                tool_input=dict(block.get("input") or {}),
            )
        if block_type == "tool_result":
            return ToolResultPart(
                tool_use_id=block["tool_use_id"],
                content=block.get("content", ""),
                is_error=block.get("is_error", False),
            )
    elif hasattr(block, "type"):
        if block.type == "text":
            return TextPart(text=block.text)
        if block.type == "tool_use":
            return ToolUsePart(
                tool_id=block.id,
                tool_name=block.name,
                tool_input=dict(block.input) if block.input else {},
            )

    raise ValueError(f"Cannot convert to MessagePart: {type(block)} - {block}")


def parts_from_content(content: list[Any] | str) -> list[MessagePart]:
    """Normalize message content to a list of parts.

    Blocks that cannot be converted (e.g. thinking blocks) are dropped.
    """
    if isinstance(content, str):
        return [TextPart(text=content)]

    parts = []
    for block in content:
        try:
            parts.append(part_from_anthropic(block))
        except ValueError:
            continue
    return parts
