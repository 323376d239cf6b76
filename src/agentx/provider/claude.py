"""Claude provider implementation."""

import os
from typing import Any, TYPE_CHECKING

from anthropic import APIError, AsyncAnthropic

from agentx.agent.message import parts_from_content
from agentx.tools import GeneratedFile, get_legacy_tools

from .base import (
    GenerationResult,
    ProviderError,
    ProviderOptions,
    RawGenerationResult,
    RawProvider,
)

if TYPE_CHECKING:
    from agentx.agent.session import Message
    from agentx.config import Config

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 8192


class ClaudeProvider(RawProvider):
    """Anthropic Claude API provider."""

    @property
    def name(self) -> str:
        return "claude"

    def __init__(self, config: "Config | None" = None, client: AsyncAnthropic | None = None) -> None:
        self.config = config
        settings = config or {}

        if client is None:
            api_key = settings.get("api_key") or os.environ.get("ANTHROPIC_API_KEY")
            if not api_key:
                raise ProviderError(
                    "Anthropic API key required. Set ANTHROPIC_API_KEY or the 'api_key' config value."
                )
            client = AsyncAnthropic(api_key=api_key)

        self.client = client
        self.model = settings.get("model") or DEFAULT_MODEL
        self.max_tokens = settings.get("max_tokens") or DEFAULT_MAX_TOKENS

    def _request(self, options: ProviderOptions | None) -> dict[str, Any]:
        options = options or ProviderOptions()
        kwargs: dict[str, Any] = {
            "model": options.model or self.model,
            "max_tokens": options.max_tokens or self.max_tokens,
        }
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature
        return kwargs

    async def _create(self, **kwargs: Any) -> Any:
        try:
            return await self.client.messages.create(**kwargs)
        except APIError as e:
            raise ProviderError(f"Anthropic API error: {e}") from e

    async def generate(
        self,
        messages: list["Message"],
        options: ProviderOptions | None = None,
    ) -> GenerationResult:
        """Plain completion offering only create_files and ask_user."""
        kwargs = self._request(options)
        system = next((m.get_text_content() for m in messages if m.role == "system"), None)
        if system:
            kwargs["system"] = system
        kwargs["messages"] = [m.to_api_format() for m in messages if m.role != "system"]
        kwargs["tools"] = get_legacy_tools()

        response = await self._create(**kwargs)

        content = ""
        files: list[GeneratedFile] = []
        follow_up = None
        for block in response.content:
            if block.type == "text":
                content += block.text
            elif block.type == "tool_use" and block.name == "create_files":
                tool_input = block.input or {}
                files.extend(GeneratedFile.from_dict(f) for f in tool_input.get("files") or [])
                if tool_input.get("summary"):
                    content += f"\n{tool_input['summary']}"
            elif block.type == "tool_use" and block.name == "ask_user":
                tool_input = block.input or {}
                follow_up = str(tool_input.get("question", ""))
                if tool_input.get("options"):
                    follow_up += f"\nOptions: {', '.join(tool_input['options'])}"

        return GenerationResult(
            content=content,
            files=files,
            follow_up=follow_up,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens,
        )

    async def generate_raw(
        self,
        messages: list["Message"],
        system_prompt: str,
        tools: list[dict[str, Any]],
        options: ProviderOptions | None = None,
    ) -> RawGenerationResult:
        """Structured turn with the given tools."""
        kwargs = self._request(options)
        kwargs["system"] = system_prompt
        kwargs["messages"] = [m.to_api_format() for m in messages if m.role != "system"]
        if tools:
            kwargs["tools"] = tools

        response = await self._create(**kwargs)

        return RawGenerationResult(
            content=parts_from_content(list(response.content)),
            stop_reason=response.stop_reason,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
