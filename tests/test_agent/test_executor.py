"""Tests for ToolExecutor."""

import asyncio

import pytest

from agentx.agent import PermissionManager, ToolExecutor
from agentx.hooks import HookRegistry
from agentx.tools import ToolCall, ToolResult


@pytest.fixture
def executor(tmp_path, permissions, hooks):
    return ToolExecutor(cwd=str(tmp_path), permission_manager=permissions, hook_registry=hooks)


def call(name, tool_input=None, call_id="toolu_1") -> ToolCall:
    return ToolCall(name=name, id=call_id, input=tool_input or {})


class TestDispatch:
    """도구 호출 분배 테스트."""

    def test_executes_tool(self, executor, tmp_path):
        (tmp_path / "a.txt").write_text("hello")

        result = executor.execute(call("read_file", {"path": "a.txt"}, call_id="toolu_42"))

        assert result.content == "hello"
        assert not result.is_error
        assert result.tool_use_id == "toolu_42"

    def test_unknown_tool(self, executor):
        result = executor.execute(call("deploy"))

        assert result.is_error
        assert result.content == "Unknown tool: deploy"
        assert result.tool_use_id == "toolu_1"

    def test_missing_required_param(self, executor):
        result = executor.execute(call("read_file", {"max_lines": 5}))

        assert result.is_error
        assert result.content == (
            "Missing required parameter(s) for read_file: path. Provided: max_lines"
        )

    def test_missing_params_none_provided(self, executor):
        result = executor.execute(call("edit_file"))
        assert result.content.endswith("Provided: (none)")
        assert "path, edits" in result.content

    def test_tool_exception_becomes_error_result(self, executor):
        """도구 예외는 에러 결과로 변환 (예외 전파 없음)."""
        result = executor.execute(call("read_file", {"path": "nope.txt"}))

        assert result.is_error
        assert result.content.startswith("Error executing read_file:")

    def test_enabled_tools_limit_dispatch(self, tmp_path, permissions, hooks):
        executor = ToolExecutor(
            cwd=str(tmp_path),
            permission_manager=permissions,
            hook_registry=hooks,
            enabled_tools=["read_file"],
        )

        assert list(executor.tools) == ["read_file"]
        assert [d["name"] for d in executor.get_tool_definitions()] == ["read_file"]
        assert executor.execute(call("list_directory")).content == "Unknown tool: list_directory"

    def test_defaults_to_process_wide_policy(self, tmp_path):
        executor = ToolExecutor(cwd=str(tmp_path))

        assert isinstance(executor.permission_manager, PermissionManager)
        assert isinstance(executor.hook_registry, HookRegistry)
        assert executor.cwd == str(tmp_path)

    def test_sync_execute_inside_loop_rejected(self, executor):
        async def inside():
            executor.execute(call("list_directory"))

        with pytest.raises(RuntimeError, match="execute_async"):
            asyncio.run(inside())


class TestToolCallHooks:
    """pre/post:tool-call 훅 테스트."""

    def test_pre_hook_blocks(self, executor, hooks, tmp_path):
        hooks.register_handler("pre:tool-call", "no-reads", lambda ctx: {"blocked": True})
        (tmp_path / "a.txt").write_text("secret")

        result = executor.execute(call("read_file", {"path": "a.txt"}))

        assert result.is_error
        assert result.content == "Blocked by hook: no-reads"
        assert result.tool_use_id == "toolu_1"

    def test_pre_hook_rewrites_input(self, executor, hooks, tmp_path):
        (tmp_path / "safe.txt").write_text("safe")

        def redirect(ctx):
            return {"modified": {"tool_input": {**ctx["tool_input"], "path": "safe.txt"}}}

        hooks.register_handler("pre:tool-call", "redirect", redirect)

        result = executor.execute(call("read_file", {"path": "other.txt"}))

        assert result.content == "safe"

    def test_post_hook_sees_result(self, executor, hooks, tmp_path):
        seen = []
        hooks.register_handler("post:tool-call", "audit", lambda ctx: seen.append(ctx))
        (tmp_path / "a.txt").write_text("data")

        executor.execute(call("read_file", {"path": "a.txt"}))

        assert seen[0]["tool_name"] == "read_file"
        assert seen[0]["tool_input"] == {"path": "a.txt"}
        assert seen[0]["tool_result"] == "data"

    def test_post_hook_failure_does_not_change_result(self, executor, hooks, tmp_path):
        def broken(ctx):
            raise RuntimeError("audit down")

        hooks.register_handler("post:tool-call", "audit", broken)
        (tmp_path / "a.txt").write_text("data")

        result = executor.execute(call("read_file", {"path": "a.txt"}))

        assert result == ToolResult(content="data", tool_use_id="toolu_1")
