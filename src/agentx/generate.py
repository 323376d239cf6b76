"""Top-level generation entry point.

Wraps one Orchestrator run in the generation-level hooks:

    pre:prompt -> pre:generate -> run -> post:response -> post:generate

``pre:prompt`` may rewrite the task. A block from any of the blocking hooks
raises HookBlockedError. Provider failures fire ``on:error`` and re-raise.
"""

import os
from dataclasses import dataclass, field
from typing import Any

from agentx.agent import AgenticStream, Orchestrator
from agentx.agent.loop import MessageInput
from agentx.agent.permissions import PermissionManager
from agentx.config import Config
from agentx.core.console import debug
from agentx.core.events import ProgressCallback
from agentx.hooks import HookBlockedError, HookRegistry, get_hook_registry
from agentx.provider import BaseProvider, ProviderError, ProviderOptions, get_provider
from agentx.tools import GeneratedFile

DEFAULT_SYSTEM_PROMPT = """You are agentx, an agentic code generation tool. You generate high-quality, production-ready output for any tech stack.

Your primary tool is `create_files`: use it to output all generated code, documents, and configs as files.
Inspect the project first when it helps (read_file, search_files, list_directory), and use run_command or edit_file when the task needs them.
If the request is ambiguous or you need critical information to proceed correctly, use `ask_user` to ask a clarifying question.

IMPORTANT RULES:
- Generate complete, working code, not stubs or placeholders
- Follow the project's existing patterns and conventions
- File paths should be relative to the project root
- Include all necessary imports
- Do NOT add unnecessary dependencies

MULTI-STEP GENERATION:
- Generate the foundational files first (schemas, types, configs)
- Include "[CONTINUE]" in your response text when there are more files to generate
- When all files are generated, do NOT include "[CONTINUE]\""""


@dataclass
class GenerateOptions:
    """Inputs for one generation."""

    task: str
    cwd: str | None = None
    system_prompt: str | None = None
    history: list[MessageInput] = field(default_factory=list)
    provider: BaseProvider | None = None
    config: Config | None = None
    tools: list[str] | None = None
    max_iterations: int | None = None
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    permission_manager: PermissionManager | None = None
    hook_registry: HookRegistry | None = None


@dataclass
class GenerateResult:
    """Outcome of one generation. Files are unique by path (last version wins)."""

    files: list[GeneratedFile] = field(default_factory=list)
    content: str = ""
    follow_up: str | None = None
    tokens_used: int = 0
    iterations: int = 0


def dedupe_files(files: list[GeneratedFile]) -> list[GeneratedFile]:
    """Keep the last version of each path, in first-seen order."""
    by_path: dict[str, GeneratedFile] = {}
    for file in files:
        by_path[file.path] = file
    return list(by_path.values())


async def _blocking_hook(
    hooks: HookRegistry, event: str, context: dict[str, Any]
) -> dict[str, Any]:
    """Run a blocking hook; raise on block, return accumulated modifications."""
    if not hooks.has(event):
        return {}
    result = await hooks.execute(event, {"event": event, **context})
    if result.blocked:
        raise HookBlockedError(event, result.message or f"Blocked by {event} hook")
    return result.modified


async def generate(
    options: GenerateOptions,
    on_progress: ProgressCallback | None = None,
) -> GenerateResult:
    """
    Run one generation.

    Raises:
        HookBlockedError: pre:prompt, pre:generate or post:response blocked
        ProviderError: the provider failed (after on:error hooks ran)
    """
    cwd = options.cwd or os.getcwd()
    config = options.config or Config(cwd)
    hooks = options.hook_registry or get_hook_registry()

    task = options.task
    modified = await _blocking_hook(hooks, "pre:prompt", {"task": task, "cwd": cwd})
    if "task" in modified:
        task = str(modified["task"])
        debug("generate", "task rewritten by pre:prompt hook")
    await _blocking_hook(hooks, "pre:generate", {"task": task, "cwd": cwd})

    provider = options.provider or get_provider(config.get("provider", "claude"), config)
    orchestrator = Orchestrator(
        provider,
        config=config,
        cwd=cwd,
        permission_manager=options.permission_manager,
        hook_registry=hooks,
    )

    messages = [*options.history, {"role": "user", "content": task}]
    provider_options = ProviderOptions(
        model=options.model,
        max_tokens=options.max_tokens,
        temperature=options.temperature,
    )

    try:
        result = await orchestrator.run(
            options.system_prompt or DEFAULT_SYSTEM_PROMPT,
            messages,
            tools=options.tools,
            max_iterations=options.max_iterations,
            on_progress=on_progress,
            provider_options=provider_options,
        )
    except ProviderError as e:
        if hooks.has("on:error"):
            await hooks.execute("on:error", {
                "event": "on:error",
                "task": task,
                "error": str(e),
                "cwd": cwd,
            })
        raise

    await _blocking_hook(hooks, "post:response", {
        "task": task,
        "content": result.content,
        "cwd": cwd,
    })
    if hooks.has("post:generate"):
        await hooks.execute("post:generate", {
            "event": "post:generate",
            "task": task,
            "content": result.content,
            "cwd": cwd,
        })

    return GenerateResult(
        files=dedupe_files(result.files),
        content=result.content,
        follow_up=result.follow_up,
        tokens_used=result.tokens_used,
        iterations=result.iterations,
    )


def stream_generate(
    options: GenerateOptions,
    on_progress: ProgressCallback | None = None,
) -> AgenticStream[GenerateResult]:
    """Same as ``generate``, consumed as a stream of progress events."""

    async def runner(emit: ProgressCallback) -> GenerateResult:
        return await generate(options, on_progress=emit)

    return AgenticStream(runner, on_progress=on_progress)
