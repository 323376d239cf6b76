"""Tests for the Orchestrator (raw tool loop and legacy text loop)."""

import asyncio

import pytest

from conftest import ScriptedRawProvider, ScriptedTextProvider, text_turn, tool_turn

from agentx.agent import (
    Orchestrator,
    TerminationReason,
    ToolResultPart,
    ToolUsePart,
    run_agentic_loop,
)
from agentx.agent.loop import CONTINUE_PROMPT
from agentx.provider import (
    GenerationResult,
    ProviderError,
    RawModeUnavailableError,
    RawProvider,
)
from agentx.tools import GeneratedFile


@pytest.fixture
def make_orchestrator(config, tmp_path, permissions, hooks):
    def make(provider):
        return Orchestrator(
            provider,
            config=config,
            cwd=str(tmp_path),
            permission_manager=permissions,
            hook_registry=hooks,
        )

    return make


def run(orchestrator, task="Build it", **kwargs):
    return asyncio.run(orchestrator.run("You are a generator.", [{"role": "user", "content": task}], **kwargs))


class SlowToolProvider(RawProvider):
    """Always asks for another directory listing after a short delay. Counts calls per task."""

    def __init__(self):
        self.calls: dict[str, int] = {}

    @property
    def name(self) -> str:
        return "slow-tool"

    async def generate(self, messages, options=None) -> GenerationResult:
        return GenerationResult(content="")

    async def generate_raw(self, messages, system_prompt, tools, options=None):
        task = messages[0].content
        self.calls[task] = self.calls.get(task, 0) + 1
        await asyncio.sleep(0.01)
        return tool_turn(("list_directory", {}))


class TestRawLoop:
    """구조화된 tool_use 루프 테스트."""

    def test_tool_turns_then_end_turn(self, make_orchestrator, tmp_path):
        (tmp_path / "a.txt").write_text("alpha\n")
        provider = ScriptedRawProvider([
            tool_turn(("read_file", {"path": "a.txt"}), text="A"),
            tool_turn(("list_directory", {}), text="B"),
            text_turn("C"),
        ])
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator)

        assert result.iterations == 3
        assert result.content == "ABC"
        assert result.tokens_used == 30
        assert len(provider.raw_calls) == 3
        assert orchestrator.context.termination_reason == TerminationReason.END_TURN
        assert orchestrator.context.total_tool_calls == 2

    def test_every_tool_use_gets_a_result(self, make_orchestrator, tmp_path):
        """각 tool_use는 다음 요청에서 정확히 하나의 tool_result를 가짐."""
        (tmp_path / "a.txt").write_text("alpha")
        turn = tool_turn(("read_file", {"path": "a.txt"}), ("read_file", {"path": "missing.txt"}))
        provider = ScriptedRawProvider([turn, text_turn("done")])

        run(make_orchestrator(provider))

        second_request = provider.raw_calls[1]["messages"]
        assistant, results = second_request[-2], second_request[-1]
        use_ids = [p.tool_id for p in assistant.content if isinstance(p, ToolUsePart)]
        result_parts = [p for p in results.content if isinstance(p, ToolResultPart)]

        assert results.role == "user"
        assert [p.tool_use_id for p in result_parts] == use_ids
        assert result_parts[0].content == "alpha"
        assert not result_parts[0].is_error
        assert result_parts[1].is_error
        assert "Error executing read_file" in result_parts[1].content

    def test_system_prompt_and_schemas_sent(self, make_orchestrator):
        provider = ScriptedRawProvider([text_turn("ok")])

        run(make_orchestrator(provider), tools=["read_file", "create_files"])

        call = provider.raw_calls[0]
        assert call["system_prompt"] == "You are a generator."
        assert [t["name"] for t in call["tools"]] == ["create_files", "read_file"]

    def test_disabled_tools_from_config(self, make_orchestrator, config):
        config.set("disabled_tools", ["run_command", "edit_file"])
        provider = ScriptedRawProvider([text_turn("ok")])

        run(make_orchestrator(provider))

        names = [t["name"] for t in provider.raw_calls[0]["tools"]]
        assert "run_command" not in names
        assert "edit_file" not in names
        assert "read_file" in names

    def test_max_iterations_caps_provider_calls(self, make_orchestrator):
        provider = ScriptedRawProvider([tool_turn(("list_directory", {})) for _ in range(10)])
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator, max_iterations=3)

        assert len(provider.raw_calls) == 3
        assert result.iterations == 3
        assert orchestrator.context.termination_reason == TerminationReason.MAX_ITERATIONS

    def test_config_iteration_cap(self, make_orchestrator, config):
        config.set("max_iterations", 2)
        provider = ScriptedRawProvider([tool_turn(("list_directory", {})) for _ in range(5)])

        result = run(make_orchestrator(provider))

        assert result.iterations == 2

    def test_overlapping_runs_keep_their_own_cap(self, make_orchestrator):
        """같은 Orchestrator에서 겹치는 두 실행은 각자 반복 횟수를 가짐."""
        provider = SlowToolProvider()
        orchestrator = make_orchestrator(provider)

        async def both():
            async def later():
                await asyncio.sleep(0.015)
                return await orchestrator.run("sys", [{"role": "user", "content": "b"}], max_iterations=3)

            return await asyncio.gather(
                orchestrator.run("sys", [{"role": "user", "content": "a"}], max_iterations=3),
                later(),
            )

        first, second = asyncio.run(both())

        assert provider.calls == {"a": 3, "b": 3}
        assert first.iterations == 3
        assert second.iterations == 3
        assert orchestrator.context.termination_reason == TerminationReason.MAX_ITERATIONS

    def test_create_files_and_ask_user_in_one_turn(self, make_orchestrator):
        """파일 생성과 질문이 같은 턴이면 둘 다 처리하고 종료."""
        files = [{"path": "src/app.py", "content": "print('hi')"}]
        provider = ScriptedRawProvider([
            tool_turn(
                ("create_files", {"files": files, "summary": "Scaffold"}),
                ("ask_user", {"question": "Which framework?", "options": ["flask", "fastapi"]}),
            ),
            text_turn("never reached"),
        ])
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator)

        assert result.iterations == 1
        assert len(provider.raw_calls) == 1
        assert result.files == [GeneratedFile(path="src/app.py", content="print('hi')")]
        assert result.follow_up == "Which framework?\nOptions: flask, fastapi"
        assert orchestrator.context.termination_reason == TerminationReason.FOLLOW_UP

    def test_unknown_tool_reported_to_model(self, make_orchestrator):
        provider = ScriptedRawProvider([tool_turn(("deploy", {})), text_turn("ok")])

        result = run(make_orchestrator(provider))

        feedback = provider.raw_calls[1]["messages"][-1].content[0]
        assert feedback.is_error
        assert feedback.content == "Unknown tool: deploy"
        assert result.content == "ok"

    @pytest.mark.parametrize("stop_reason,reason", [
        ("max_tokens", TerminationReason.MAX_TOKENS),
        ("stop_sequence", TerminationReason.UNKNOWN_STOP),
    ])
    def test_other_stop_reasons_end_run(self, make_orchestrator, stop_reason, reason):
        provider = ScriptedRawProvider([text_turn("partial", stop_reason=stop_reason)])
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator)

        assert result.content == "partial"
        assert orchestrator.context.termination_reason == reason

    def test_tool_use_without_calls_ends_run(self, make_orchestrator):
        provider = ScriptedRawProvider([text_turn("hm", stop_reason="tool_use")])
        orchestrator = make_orchestrator(provider)

        run(orchestrator)

        assert orchestrator.context.termination_reason == TerminationReason.NO_TOOL_CALLS

    def test_should_stop(self, make_orchestrator):
        provider = ScriptedRawProvider([text_turn("never")])
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator, should_stop=lambda: True)

        assert result.iterations == 0
        assert provider.raw_calls == []
        assert orchestrator.context.termination_reason == TerminationReason.CANCELLED

    def test_progress_events(self, make_orchestrator):
        events = []
        provider = ScriptedRawProvider([
            tool_turn(("create_files", {"files": [{"path": "a.py", "content": "x"}]}), text="Here"),
            text_turn("Done"),
        ])

        run(make_orchestrator(provider), on_progress=events.append)

        assert [e.type for e in events] == [
            "iteration_start",
            "text_delta",
            "tool_call",
            "tool_result",
            "files_created",
            "iteration_start",
            "text_delta",
            "complete",
        ]
        assert events[-1].iterations == 2

    def test_tool_result_event_preview(self, make_orchestrator, tmp_path):
        (tmp_path / "big.txt").write_text("y" * 1000)
        events = []
        provider = ScriptedRawProvider([tool_turn(("read_file", {"path": "big.txt"})), text_turn("")])

        run(make_orchestrator(provider), on_progress=events.append)

        tool_result = next(e for e in events if e.type == "tool_result")
        assert len(tool_result.content) == 200


class TestRawFallback:
    """raw 모드 불가 시 legacy 루프 전환 테스트."""

    @pytest.mark.parametrize("error", [
        RawModeUnavailableError(),
        ProviderError("Structured output is not available for this model"),
    ])
    def test_falls_back_to_legacy(self, make_orchestrator, error):
        provider = ScriptedRawProvider(
            [error], legacy_results=[GenerationResult(content="legacy text", tokens_used=7)]
        )
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator)

        assert result.content == "legacy text"
        assert result.iterations == 1
        assert result.tokens_used == 7
        assert len(provider.raw_calls) == 1
        assert len(provider.generate_calls) == 1
        assert orchestrator.context.legacy

    def test_fallback_announces_first_iteration_once(self, make_orchestrator):
        events = []
        provider = ScriptedRawProvider(
            [RawModeUnavailableError()], legacy_results=[GenerationResult(content="legacy text")]
        )

        run(make_orchestrator(provider), on_progress=events.append)

        assert [e.type for e in events] == ["iteration_start", "text_delta", "complete"]
        assert events[0].iteration == 1

    def test_other_provider_errors_propagate(self, make_orchestrator):
        provider = ScriptedRawProvider([ProviderError("Anthropic API error: overloaded")])
        orchestrator = make_orchestrator(provider)

        with pytest.raises(ProviderError, match="overloaded"):
            run(orchestrator)

        assert provider.generate_calls == []
        assert orchestrator.context.termination_reason == TerminationReason.ERROR


class TestLegacyLoop:
    """텍스트 전용 공급자 루프 테스트."""

    def test_continues_while_files_and_marker(self, make_orchestrator):
        provider = ScriptedTextProvider([
            GenerationResult(
                content="Schema first. [CONTINUE]",
                files=[GeneratedFile(path="schema.sql", content="create table t();", description="Schema")],
                tokens_used=5,
            ),
            GenerationResult(content="All done.", tokens_used=5),
        ])
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator)

        assert result.iterations == 2
        assert result.content == "All done."
        assert result.tokens_used == 10
        assert [f.path for f in result.files] == ["schema.sql"]
        assert orchestrator.context.termination_reason == TerminationReason.NO_CONTINUATION

        first, second = provider.calls
        assert first[0].role == "system"
        assert "# Available Capabilities" in first[0].content
        assert second[-2].role == "assistant"
        assert second[-2].content.endswith("Files created:\nCreated: schema.sql - Schema")
        assert second[-1].content == CONTINUE_PROMPT

    def test_stops_without_marker(self, make_orchestrator):
        provider = ScriptedTextProvider([
            GenerationResult(content="Here you go.", files=[GeneratedFile(path="a.py", content="")]),
            GenerationResult(content="unused"),
        ])

        result = run(make_orchestrator(provider))

        assert result.iterations == 1
        assert len(provider.calls) == 1

    def test_provider_follow_up(self, make_orchestrator):
        provider = ScriptedTextProvider([GenerationResult(content="", follow_up="Which port?")])
        orchestrator = make_orchestrator(provider)

        result = run(orchestrator)

        assert result.follow_up == "Which port?"
        assert orchestrator.context.termination_reason == TerminationReason.FOLLOW_UP

    def test_inferred_follow_up(self, make_orchestrator):
        provider = ScriptedTextProvider([
            GenerationResult(content="I need a detail.\nWhich database should I use?\n- Postgres\n- SQLite")
        ])

        result = run(make_orchestrator(provider))

        assert result.follow_up == "Which database should I use?\n- Postgres\n- SQLite"

    def test_legacy_iteration_cap(self, make_orchestrator, config):
        config.set("legacy_max_iterations", 2)
        provider = ScriptedTextProvider([
            GenerationResult(content="more [CONTINUE]", files=[GeneratedFile(path=f"f{i}.py", content="")])
            for i in range(5)
        ])

        result = run(make_orchestrator(provider))

        assert result.iterations == 2
        assert len(result.files) == 2


class TestStreamAndHelpers:
    """stream() 및 run_agentic_loop 테스트."""

    def test_stream_yields_events_then_result(self, make_orchestrator):
        provider = ScriptedRawProvider([text_turn("streamed")])
        orchestrator = make_orchestrator(provider)

        async def consume():
            stream = orchestrator.stream("sys", [{"role": "user", "content": "go"}])
            return await stream.collect()

        events, result = asyncio.run(consume())

        assert [e.type for e in events] == ["iteration_start", "text_delta", "complete"]
        assert result.content == "streamed"

    def test_stream_surfaces_errors(self, make_orchestrator):
        provider = ScriptedRawProvider([ProviderError("Anthropic API error: boom")])
        orchestrator = make_orchestrator(provider)

        async def consume():
            stream = orchestrator.stream("sys", [{"role": "user", "content": "go"}])
            return [event async for event in stream]

        with pytest.raises(ProviderError):
            asyncio.run(consume())

    def test_run_agentic_loop(self, config, tmp_path, permissions, hooks):
        provider = ScriptedRawProvider([text_turn("hi")])

        result = asyncio.run(run_agentic_loop(
            provider,
            "sys",
            [{"role": "user", "content": "go"}],
            config=config,
            cwd=str(tmp_path),
            permission_manager=permissions,
            hook_registry=hooks,
            max_iterations=1,
        ))

        assert result.content == "hi"
        assert result.iterations == 1
