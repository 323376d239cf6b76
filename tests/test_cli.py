"""CLI tests."""

import asyncio

import pytest
from click.testing import CliRunner

from conftest import ScriptedRawProvider, text_turn, tool_turn

from agentx.agent import PermissionManager
from agentx.cli import main as cli_main
from agentx.provider import ProviderError
from agentx.tools import GeneratedFile


@pytest.fixture
def use_provider(monkeypatch):
    def install(provider):
        monkeypatch.setattr(cli_main, "get_provider", lambda name, config: provider)
        return provider

    return install


@pytest.fixture
def project(config, tmp_path):
    # `config` isolates HOME and AGENTX_* variables
    return tmp_path


class TestRunCommand:
    """agentx run 테스트."""

    def test_prints_content_and_files(self, use_provider, project):
        use_provider(ScriptedRawProvider([
            tool_turn(("create_files", {"files": [{"path": "app.py", "content": "print(1)", "description": "Entry"}]})),
            text_turn("All set."),
        ]))

        result = CliRunner().invoke(cli_main.cli, ["run", "Make an app", "--cwd", str(project)])

        assert result.exit_code == 0, result.output
        assert "All set." in result.output
        assert "app.py" in result.output
        assert not (project / "app.py").exists()

    def test_output_dir_writes_files(self, use_provider, project):
        use_provider(ScriptedRawProvider([
            tool_turn(("create_files", {"files": [{"path": "src/app.py", "content": "print(1)"}]})),
            text_turn("Done."),
        ]))
        out = project / "out"

        result = CliRunner().invoke(cli_main.cli, [
            "run", "Make an app", "--cwd", str(project), "--mode", "acceptEdits", "--output-dir", str(out),
        ])

        assert result.exit_code == 0, result.output
        assert (out / "src" / "app.py").read_text() == "print(1)"
        assert "Wrote 1 file(s)" in result.output

    def test_plan_mode_skips_writes(self, use_provider, project):
        use_provider(ScriptedRawProvider([
            tool_turn(("create_files", {"files": [{"path": "app.py", "content": "x"}]})),
            text_turn("Done."),
        ]))
        out = project / "out"

        result = CliRunner().invoke(cli_main.cli, [
            "run", "Make an app", "--cwd", str(project), "--mode", "plan", "--output-dir", str(out),
        ])

        assert result.exit_code == 0, result.output
        assert not (out / "app.py").exists()
        assert "Skipped (skip)" in result.output

    def test_follow_up_panel(self, use_provider, project):
        use_provider(ScriptedRawProvider([
            tool_turn(("ask_user", {"question": "Which framework?"})),
        ]))

        result = CliRunner().invoke(cli_main.cli, ["run", "Make an API", "--cwd", str(project)])

        assert result.exit_code == 0, result.output
        assert "Which framework?" in result.output

    def test_provider_error_exits(self, use_provider, project):
        use_provider(ScriptedRawProvider([ProviderError("Anthropic API error: overloaded")]))

        result = CliRunner().invoke(cli_main.cli, ["run", "x", "--cwd", str(project)])

        assert result.exit_code == 1
        assert "overloaded" in result.output

    def test_invalid_mode(self, project):
        result = CliRunner().invoke(cli_main.cli, ["run", "x", "--cwd", str(project), "--mode", "sudo"])
        assert result.exit_code == 2


class TestWriteFiles:
    """--output-dir 파일 쓰기 테스트."""

    def test_refuses_paths_outside_output_dir(self, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        files = [
            GeneratedFile(path="../escape.py", content="x"),
            GeneratedFile(path=str(tmp_path / "abs.py"), content="x"),
            GeneratedFile(path="pkg/ok.py", content="ok"),
        ]

        written = asyncio.run(cli_main.write_files(files, out, PermissionManager(mode="yolo")))

        assert written == 1
        assert (out / "pkg" / "ok.py").read_text() == "ok"
        assert not (tmp_path / "escape.py").exists()
        assert not (tmp_path / "abs.py").exists()
