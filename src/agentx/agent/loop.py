"""Orchestrator - the agentic tool loop.

Each iteration calls the provider once with the whole conversation and the
tool schemas. A ``tool_use`` turn is answered by running every requested tool
in order and appending all results as one user turn; ``end_turn`` and
``max_tokens`` finish the run; any other stop reason also ends it. An
``ask_user`` follow-up ends the run after the current turn's tools have run.

Providers without structured turns run the legacy loop instead: one plain
completion per step, with continuation and follow-up guessed from the text.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Sequence

from agentx.config import Config
from agentx.core.console import debug
from agentx.core.events import (
    CompleteEvent,
    Event,
    FilesCreatedEvent,
    IterationStartEvent,
    ProgressCallback,
    TextDeltaEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from agentx.provider.base import (
    BaseProvider,
    ProviderOptions,
    RawProvider,
    is_raw_unavailable,
)
from agentx.tools import GeneratedFile, ToolCall, format_tools_for_system_prompt

from .executor import ToolExecutor
from .message import TextPart, ToolResultPart, ToolUsePart
from .session import Conversation, Message
from .signals import HeuristicTextSignals, TextSignals
from .states import LoopContext, LoopState, TerminationReason
from .stream import AgenticStream

if TYPE_CHECKING:
    from agentx.hooks import HookRegistry

    from .permissions import PermissionManager

CONTINUE_PROMPT = (
    "Continue generating the remaining files. Build on what you've already created. "
    "When finished, do not include [CONTINUE] in your response."
)

TOOL_RESULT_PREVIEW_CHARS = 200

MessageInput = Message | dict[str, Any]


@dataclass
class AgenticResult:
    """Terminal value of one run."""

    files: list[GeneratedFile] = field(default_factory=list)
    content: str = ""
    follow_up: str | None = None
    tokens_used: int = 0
    iterations: int = 0


def _to_message(message: MessageInput) -> Message:
    if isinstance(message, Message):
        return message
    return Message.create(message["role"], message["content"])


def _no_progress(event: Event) -> None:
    pass


class Orchestrator:
    """Drives provider and tool turns until the model finishes."""

    def __init__(
        self,
        provider: BaseProvider,
        config: Config | None = None,
        executor: ToolExecutor | None = None,
        signals: TextSignals | None = None,
        cwd: str | None = None,
        permission_manager: PermissionManager | None = None,
        hook_registry: HookRegistry | None = None,
    ) -> None:
        """
        Args:
            provider: Text-only or raw-capable provider
            config: Settings (defaults to a freshly loaded Config)
            executor: Tool executor to use for every run (built per run if None)
            signals: Legacy-loop text heuristics
            cwd: Working directory for tools
            permission_manager: Passed to executors built per run
            hook_registry: Passed to executors built per run
        """
        self.provider = provider
        self.config = config or Config()
        self.signals: TextSignals = signals or HeuristicTextSignals()
        self.cwd = cwd
        self.permission_manager = permission_manager
        self.hook_registry = hook_registry
        self._executor = executor

        # Resolved once: structured tool loop or legacy text loop
        self.raw_capable = isinstance(provider, RawProvider)

        # Most recent run; each run owns its own context
        self.context = LoopContext(max_iterations=self.config.get("max_iterations", 20))
        self.conversation: Conversation | None = None

    # --- Setup ---

    def _enabled_tools(self, tools: Sequence[str] | None) -> list[str]:
        if tools is not None:
            return list(tools)
        disabled = set(self.config.get("disabled_tools", []) or [])
        return [t for t in self.config.get("enabled_tools", []) or [] if t not in disabled]

    def _executor_for(self, enabled: list[str]) -> ToolExecutor:
        if self._executor is not None:
            return self._executor
        return ToolExecutor(
            cwd=self.cwd,
            permission_manager=self.permission_manager,
            hook_registry=self.hook_registry,
            dry_run=bool(self.config.get("dry_run", False)),
            enabled_tools=enabled,
        )

    # --- Public API ---

    async def run(
        self,
        system_prompt: str,
        messages: Sequence[MessageInput],
        *,
        tools: Sequence[str] | None = None,
        max_iterations: int | None = None,
        on_progress: ProgressCallback | None = None,
        provider_options: ProviderOptions | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> AgenticResult:
        """Run until the model finishes, asks a question, or hits the iteration cap.

        Args:
            system_prompt: System prompt
            messages: Initial conversation (Message objects or role/content dicts)
            tools: Enabled tool names (config ``enabled_tools`` minus ``disabled_tools`` if None)
            max_iterations: Provider call cap (config default if None)
            on_progress: Receives progress events
            provider_options: Per-call provider overrides
            should_stop: Checked before each iteration; True stops the run

        Returns:
            AgenticResult. Reaching the cap returns what has accumulated.

        Raises:
            ProviderError: provider failures other than "raw mode unavailable"
        """
        inputs = [_to_message(m) for m in messages]
        emit = on_progress or _no_progress
        options = provider_options or ProviderOptions()

        if not self.raw_capable:
            return await self._run_legacy(system_prompt, inputs, max_iterations, emit, options, should_stop)
        return await self._run_raw(
            system_prompt, inputs, tools, max_iterations, emit, options, should_stop
        )

    def stream(
        self,
        system_prompt: str,
        messages: Sequence[MessageInput],
        **kwargs: Any,
    ) -> AgenticStream:
        """Run in the background and consume progress events with ``async for``.

        Accepts the keyword arguments of ``run``. ``await stream.result()``
        returns the final AgenticResult.
        """
        on_progress = kwargs.pop("on_progress", None)

        async def runner(emit: ProgressCallback) -> AgenticResult:
            return await self.run(system_prompt, messages, on_progress=emit, **kwargs)

        return AgenticStream(runner, on_progress=on_progress)

    # --- Raw tool loop ---

    async def _run_raw(
        self,
        system_prompt: str,
        inputs: list[Message],
        tools: Sequence[str] | None,
        max_iterations: int | None,
        emit: ProgressCallback,
        options: ProviderOptions,
        should_stop: Callable[[], bool] | None,
    ) -> AgenticResult:
        limit = max_iterations if max_iterations is not None else self.config.get("max_iterations", 20)
        ctx = LoopContext(max_iterations=limit, start_time=time.time())
        self.context = ctx

        enabled = self._enabled_tools(tools)
        executor = self._executor_for(enabled)
        schemas = [d for d in executor.get_tool_definitions() if d["name"] in enabled]

        conversation = Conversation([m for m in inputs if m.role != "system"])
        self.conversation = conversation

        files: list[GeneratedFile] = []
        text = ""
        follow_up: str | None = None

        try:
            while ctx.iteration < limit:
                if should_stop is not None and should_stop():
                    ctx.finish(TerminationReason.CANCELLED)
                    break

                ctx.iteration += 1
                emit(IterationStartEvent(iteration=ctx.iteration))
                debug("orchestrator", f"iteration {ctx.iteration} ({len(schemas)} tools available)")

                ctx.record_state(LoopState.CALLING_PROVIDER)
                try:
                    result = await self.provider.generate_raw(
                        list(conversation.messages), system_prompt, schemas, options
                    )
                except Exception as e:
                    if not is_raw_unavailable(e):
                        raise
                    debug("orchestrator", f"raw mode unavailable ({e}), switching to legacy loop")
                    return await self._run_legacy(
                        system_prompt, inputs, max_iterations, emit, options, should_stop,
                        fallback=True,
                    )

                ctx.total_provider_calls += 1
                ctx.total_tokens += result.total_tokens

                for part in result.content:
                    if isinstance(part, TextPart):
                        text += part.text
                        emit(TextDeltaEvent(text=part.text))

                if result.stop_reason == "end_turn":
                    ctx.finish(TerminationReason.END_TURN)
                    break
                if result.stop_reason == "max_tokens":
                    ctx.finish(TerminationReason.MAX_TOKENS)
                    break
                if result.stop_reason != "tool_use":
                    debug("orchestrator", f"unexpected stop reason: {result.stop_reason}")
                    ctx.finish(TerminationReason.UNKNOWN_STOP)
                    break

                tool_uses = [p for p in result.content if isinstance(p, ToolUsePart)]
                if not tool_uses:
                    ctx.finish(TerminationReason.NO_TOOL_CALLS)
                    break

                conversation.add_assistant_message(result.content)
                ctx.record_state(LoopState.EXECUTING_TOOLS)

                # Sequential: later calls may depend on earlier side effects
                tool_results: list[ToolResultPart] = []
                for use in tool_uses:
                    emit(ToolCallEvent(name=use.tool_name, id=use.tool_id, input=use.tool_input))
                    debug("orchestrator", f"tool call: {use.tool_name}")

                    tool_result = await executor.execute_async(
                        ToolCall(name=use.tool_name, id=use.tool_id, input=use.tool_input)
                    )
                    ctx.total_tool_calls += 1

                    emit(ToolResultEvent(
                        name=use.tool_name,
                        id=use.tool_id,
                        content=tool_result.content[:TOOL_RESULT_PREVIEW_CHARS],
                        is_error=tool_result.is_error,
                    ))

                    if tool_result.files:
                        files.extend(tool_result.files)
                        emit(FilesCreatedEvent(files=list(tool_result.files)))
                    if tool_result.follow_up:
                        follow_up = tool_result.follow_up

                    tool_results.append(ToolResultPart(
                        tool_use_id=use.tool_id,
                        content=tool_result.content,
                        is_error=tool_result.is_error,
                    ))

                conversation.add_tool_results(tool_results)

                if follow_up:
                    ctx.finish(TerminationReason.FOLLOW_UP)
                    break
            else:
                ctx.finish(TerminationReason.MAX_ITERATIONS)

        except Exception as e:
            ctx.last_error = e
            ctx.termination_reason = TerminationReason.ERROR
            ctx.record_state(LoopState.ERROR)
            raise
        finally:
            ctx.end_time = time.time()

        emit(CompleteEvent(iterations=ctx.iteration, total_tokens=ctx.total_tokens))
        return AgenticResult(
            files=files,
            content=text,
            follow_up=follow_up,
            tokens_used=ctx.total_tokens,
            iterations=ctx.iteration,
        )

    # --- Legacy text loop ---

    async def _run_legacy(
        self,
        system_prompt: str,
        inputs: list[Message],
        max_iterations: int | None,
        emit: ProgressCallback,
        options: ProviderOptions,
        should_stop: Callable[[], bool] | None,
        fallback: bool = False,
    ) -> AgenticResult:
        limit = (
            max_iterations
            if max_iterations is not None
            else self.config.get("legacy_max_iterations", 5)
        )
        ctx = LoopContext(max_iterations=limit, legacy=True, start_time=time.time())
        self.context = ctx

        history = [Message(role="system", content=f"{system_prompt}\n\n{format_tools_for_system_prompt()}")]
        history.extend(m for m in inputs if m.role != "system")
        self.conversation = None

        files: list[GeneratedFile] = []
        content = ""
        follow_up: str | None = None

        try:
            while ctx.iteration < limit:
                if should_stop is not None and should_stop():
                    ctx.finish(TerminationReason.CANCELLED)
                    break

                ctx.iteration += 1
                # The raw loop already announced the first iteration before falling back
                if not (fallback and ctx.iteration == 1):
                    emit(IterationStartEvent(iteration=ctx.iteration))
                debug("orchestrator", f"legacy step {ctx.iteration} (model: {options.model or 'default'})")

                ctx.record_state(LoopState.CALLING_PROVIDER)
                result = await self.provider.generate(list(history), options)
                ctx.total_provider_calls += 1
                ctx.total_tokens += result.tokens_used or 0

                content = result.content
                if content:
                    emit(TextDeltaEvent(text=content))
                if result.files:
                    files.extend(result.files)
                    emit(FilesCreatedEvent(files=list(result.files)))

                step_follow_up = result.follow_up
                if not step_follow_up and not result.files:
                    step_follow_up = self.signals.infer_follow_up(content)
                if step_follow_up:
                    follow_up = step_follow_up
                    ctx.finish(TerminationReason.FOLLOW_UP)
                    break

                if not result.files and ctx.iteration > 1:
                    ctx.finish(TerminationReason.NO_CONTINUATION)
                    break
                if not self.signals.infer_continuation(content):
                    ctx.finish(TerminationReason.NO_CONTINUATION)
                    break

                summary = "\n".join(
                    f"Created: {f.path}" + (f" - {f.description}" if f.description else "")
                    for f in result.files
                )
                history.append(Message(
                    role="assistant",
                    content=content + (f"\n\nFiles created:\n{summary}" if summary else ""),
                ))
                history.append(Message(role="user", content=CONTINUE_PROMPT))
            else:
                ctx.finish(TerminationReason.MAX_ITERATIONS)

        except Exception as e:
            ctx.last_error = e
            ctx.termination_reason = TerminationReason.ERROR
            ctx.record_state(LoopState.ERROR)
            raise
        finally:
            ctx.end_time = time.time()

        emit(CompleteEvent(iterations=ctx.iteration, total_tokens=ctx.total_tokens))
        return AgenticResult(
            files=files,
            content=content,
            follow_up=follow_up,
            tokens_used=ctx.total_tokens,
            iterations=ctx.iteration,
        )


async def run_agentic_loop(
    provider: BaseProvider,
    system_prompt: str,
    messages: Sequence[MessageInput],
    *,
    config: Config | None = None,
    executor: ToolExecutor | None = None,
    cwd: str | None = None,
    permission_manager: PermissionManager | None = None,
    hook_registry: HookRegistry | None = None,
    **run_kwargs: Any,
) -> AgenticResult:
    """Build an Orchestrator and run it once. ``run_kwargs`` go to ``Orchestrator.run``."""
    orchestrator = Orchestrator(
        provider,
        config=config,
        executor=executor,
        cwd=cwd,
        permission_manager=permission_manager,
        hook_registry=hook_registry,
    )
    return await orchestrator.run(system_prompt, messages, **run_kwargs)
