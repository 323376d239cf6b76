"""LLM provider interfaces.

Two variants:
- BaseProvider: text-only. ``generate`` returns text plus any files and
  follow-up the provider extracted itself. Drives the legacy loop.
- RawProvider: additionally returns structured turns (content blocks and a
  stop reason) through ``generate_raw``. Drives the tool loop.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from agentx.agent.message import MessagePart
    from agentx.agent.session import Message
    from agentx.tools.base import GeneratedFile


STOP_REASONS = ("end_turn", "tool_use", "max_tokens", "stop_sequence")


class ProviderError(Exception):
    """Provider call failed."""


class RawModeUnavailableError(ProviderError):
    """The provider cannot produce structured tool-call turns right now."""

    def __init__(self, message: str = "Raw generation is not available for this provider") -> None:
        super().__init__(message)


def is_raw_unavailable(error: Exception) -> bool:
    """True for errors that mean "fall back to the legacy loop"."""
    return isinstance(error, RawModeUnavailableError) or (
        isinstance(error, ProviderError) and "not available" in str(error)
    )


@dataclass
class ProviderOptions:
    """Per-call overrides. None means provider default."""

    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None


@dataclass
class GenerationResult:
    """Text-only provider response."""

    content: str
    files: list["GeneratedFile"] = field(default_factory=list)
    follow_up: str | None = None
    tokens_used: int = 0


@dataclass
class RawGenerationResult:
    """Structured provider response."""

    content: list["MessagePart"]  # TextPart, ToolUsePart
    stop_reason: str
    usage: dict[str, int] = field(default_factory=dict)  # input_tokens, output_tokens

    @property
    def total_tokens(self) -> int:
        return self.usage.get("input_tokens", 0) + self.usage.get("output_tokens", 0)


class BaseProvider(ABC):
    """Text-only LLM provider."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @abstractmethod
    async def generate(
        self,
        messages: list["Message"],
        options: ProviderOptions | None = None,
    ) -> GenerationResult:
        """
        One plain completion.

        Args:
            messages: Conversation; a leading system message carries the system prompt
            options: Per-call overrides

        Returns:
            GenerationResult
        """
        pass


class RawProvider(BaseProvider):
    """Provider that can return structured tool-call turns."""

    @abstractmethod
    async def generate_raw(
        self,
        messages: list["Message"],
        system_prompt: str,
        tools: list[dict[str, Any]],
        options: ProviderOptions | None = None,
    ) -> RawGenerationResult:
        """
        One structured turn.

        Args:
            messages: Conversation without system messages
            system_prompt: System prompt
            tools: Tool schemas (Anthropic format)
            options: Per-call overrides

        Raises:
            RawModeUnavailableError: structured turns are unsupported; the
                caller should fall back to ``generate``
        """
        pass
