"""Shared fixtures and stub providers."""

import itertools
import os
from typing import Any

import pytest

from agentx.agent import PermissionManager, TextPart, ToolUsePart, set_permission_manager
from agentx.config import Config
from agentx.hooks import HookRegistry, clear_script_handlers, set_hook_registry
from agentx.provider import (
    BaseProvider,
    GenerationResult,
    ProviderOptions,
    RawGenerationResult,
    RawProvider,
)
from agentx.tools import ToolContext

_ids = itertools.count(1)


def text_turn(text: str, stop_reason: str = "end_turn", tokens: int = 10) -> RawGenerationResult:
    """A structured turn with only text."""
    return RawGenerationResult(
        content=[TextPart(text=text)],
        stop_reason=stop_reason,
        usage={"input_tokens": tokens, "output_tokens": 0},
    )


def tool_turn(*calls: tuple[str, dict[str, Any]], text: str = "", tokens: int = 10) -> RawGenerationResult:
    """A tool_use turn. Each call is (tool_name, tool_input)."""
    content: list[Any] = [TextPart(text=text)] if text else []
    for name, tool_input in calls:
        content.append(ToolUsePart(tool_id=f"toolu_{next(_ids)}", tool_name=name, tool_input=tool_input))
    return RawGenerationResult(
        content=content,
        stop_reason="tool_use",
        usage={"input_tokens": tokens, "output_tokens": 0},
    )


class ScriptedRawProvider(RawProvider):
    """Returns queued structured turns; an Exception in the queue is raised.

    Falls back to ``legacy_results`` for plain ``generate`` calls.
    """

    def __init__(self, turns=None, legacy_results=None):
        self.turns = list(turns or [])
        self.legacy_results = list(legacy_results or [])
        self.raw_calls: list[dict[str, Any]] = []
        self.generate_calls: list[list[Any]] = []

    @property
    def name(self) -> str:
        return "scripted-raw"

    async def generate(self, messages, options: ProviderOptions | None = None) -> GenerationResult:
        self.generate_calls.append(list(messages))
        if self.legacy_results:
            return self.legacy_results.pop(0)
        return GenerationResult(content="done")

    async def generate_raw(self, messages, system_prompt, tools, options=None) -> RawGenerationResult:
        self.raw_calls.append({
            "messages": list(messages),
            "system_prompt": system_prompt,
            "tools": tools,
            "options": options,
        })
        turn = self.turns.pop(0) if self.turns else text_turn("")
        if isinstance(turn, Exception):
            raise turn
        return turn


class ScriptedTextProvider(BaseProvider):
    """Text-only provider returning queued GenerationResults."""

    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls: list[list[Any]] = []

    @property
    def name(self) -> str:
        return "scripted-text"

    async def generate(self, messages, options: ProviderOptions | None = None) -> GenerationResult:
        self.calls.append(list(messages))
        if self.results:
            return self.results.pop(0)
        return GenerationResult(content="")


@pytest.fixture(autouse=True)
def isolated_globals():
    """Fresh process-wide permission manager, hook registry and script table per test."""
    set_permission_manager(PermissionManager(mode="acceptEdits"))
    set_hook_registry(HookRegistry())
    clear_script_handlers()
    yield
    clear_script_handlers()


@pytest.fixture
def permissions():
    return PermissionManager(mode="acceptEdits")


@pytest.fixture
def hooks():
    return HookRegistry()


@pytest.fixture
def tool_context(tmp_path, permissions, hooks):
    return ToolContext(cwd=str(tmp_path), permissions=permissions, hooks=hooks)


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config isolated from the user's home directory and AGENTX_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith(Config.ENV_PREFIX):
            monkeypatch.delenv(key)
    return Config(tmp_path)
