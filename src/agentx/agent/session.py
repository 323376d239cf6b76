"""Conversation messages.

A Conversation is the append-only message history owned by one orchestrator
run. It also guards the tool_use/tool_result pairing: the results appended
after an assistant turn must answer exactly the tool calls of that turn.
"""

from dataclasses import dataclass
from typing import Any, Literal, Sequence
from uuid import uuid4

from .message import (
    MessagePart,
    TextPart,
    ToolResultPart,
    ToolUsePart,
    parts_from_content,
)

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Message:
    """One conversation message.

    ``content`` is either plain text or an ordered list of content blocks.
    """

    role: Role
    content: str | tuple[MessagePart, ...]

    @classmethod
    def create(cls, role: Role, content: str | Sequence[Any]) -> "Message":
        """Build a message, converting block lists to parts."""
        if isinstance(content, str):
            return cls(role=role, content=content)
        return cls(role=role, content=tuple(parts_from_content(list(content))))

    @property
    def parts(self) -> list[MessagePart]:
        """Content as a part list (plain text becomes one TextPart)."""
        if isinstance(self.content, str):
            return [TextPart(text=self.content)]
        return list(self.content)

    def get_text_content(self) -> str:
        """All text blocks joined together."""
        if isinstance(self.content, str):
            return self.content
        return "".join(p.text for p in self.content if isinstance(p, TextPart))

    def get_tool_uses(self) -> list[ToolUsePart]:
        return [p for p in self.parts if isinstance(p, ToolUsePart)]

    def to_api_format(self) -> dict[str, Any]:
        """Convert to the provider wire format."""
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {
            "role": self.role,
            "content": [part.to_api_format() for part in self.content],
        }

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {"role": self.role, "parts": [part.to_dict() for part in self.content]}


class Conversation:
    """Append-only message history."""

    def __init__(self, messages: Sequence[Message] | None = None) -> None:
        self.id: str = str(uuid4())
        self._messages: list[Message] = []
        for message in messages or []:
            self.append(message)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, message: Message) -> Message:
        """Append a message.

        Raises:
            ValueError: tool results are still owed for the previous turn
        """
        pending = self.pending_tool_use_ids()
        if pending and not self._answers(message, pending):
            raise ValueError(
                f"Expected tool results for {sorted(pending)} before the next message"
            )
        self._messages.append(message)
        return message

    def add_user_message(self, content: str | Sequence[Any]) -> Message:
        return self.append(Message.create("user", content))

    def add_assistant_message(self, content: str | Sequence[Any]) -> Message:
        return self.append(Message.create("assistant", content))

    def add_tool_results(self, results: Sequence[ToolResultPart]) -> Message:
        """Append one user turn carrying a tool_result for every pending tool_use.

        Raises:
            ValueError: the result ids do not match the pending tool_use ids
                exactly once each
        """
        ids = [r.tool_use_id for r in results]
        pending = self.pending_tool_use_ids()
        if len(ids) != len(set(ids)) or set(ids) != pending:
            raise ValueError(
                f"Tool results {ids} do not match pending tool calls {sorted(pending)}"
            )
        return self.append(Message(role="user", content=tuple(results)))

    def pending_tool_use_ids(self) -> set[str]:
        """Ids of tool_use blocks in the last assistant turn that have no result yet."""
        if not self._messages:
            return set()
        last = self._messages[-1]
        if last.role != "assistant":
            return set()
        return {p.tool_id for p in last.get_tool_uses()}

    @staticmethod
    def _answers(message: Message, pending: set[str]) -> bool:
        if message.role != "user" or isinstance(message.content, str):
            return False
        ids = [p.tool_use_id for p in message.content if isinstance(p, ToolResultPart)]
        return len(ids) == len(set(ids)) and set(ids) == pending

    def to_api_format(self) -> list[dict[str, Any]]:
        """Wire-format message list (system messages are not part of it)."""
        return [m.to_api_format() for m in self._messages if m.role != "system"]
