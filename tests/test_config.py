"""Configuration tests."""

import json

from agentx.config import DEFAULT_CONFIG, Config


class TestConfig:
    """Config 계층 로딩 테스트."""

    def test_defaults(self, config):
        assert config.get("max_iterations") == 20
        assert config.get("legacy_max_iterations") == 5
        assert config.get("permission_mode") == "default"
        assert config.get("enabled_tools") == DEFAULT_CONFIG["enabled_tools"]

    def test_defaults_not_shared(self, config):
        config.get("enabled_tools").append("deploy")
        assert "deploy" not in DEFAULT_CONFIG["enabled_tools"]

    def test_project_file_overrides_global(self, config, tmp_path):
        global_dir = tmp_path / "home" / ".agentx"
        global_dir.mkdir()
        (global_dir / "config.json").write_text(json.dumps({"max_iterations": 7, "model": "global"}))
        (tmp_path / ".agentx.json").write_text(json.dumps({"max_iterations": 9}))

        reloaded = Config(tmp_path)

        assert reloaded.get("max_iterations") == 9
        assert reloaded.get("model") == "global"

    def test_env_overrides_files(self, config, tmp_path, monkeypatch):
        (tmp_path / ".agentx.json").write_text(json.dumps({"permission_mode": "plan"}))
        monkeypatch.setenv("AGENTX_PERMISSION_MODE", "yolo")
        monkeypatch.setenv("AGENTX_MAX_ITERATIONS", "3")
        monkeypatch.setenv("AGENTX_DRY_RUN", "true")
        monkeypatch.setenv("AGENTX_PERMISSION_DENY", '["*.env"]')

        reloaded = Config(tmp_path)

        assert reloaded.get("permission_mode") == "yolo"
        assert reloaded.get("max_iterations") == 3
        assert reloaded.get("dry_run") is True
        assert reloaded.get("permission_deny") == ["*.env"]

    def test_broken_file_ignored(self, config, tmp_path):
        (tmp_path / ".agentx.json").write_text("{not json")
        assert Config(tmp_path).get("max_iterations") == 20

    def test_set_override(self, config):
        config.set("debug", True)
        assert config["debug"] is True
        assert "debug" in config
        assert config.to_dict()["debug"] is True
