"""Tests for config loading, saving and constants."""

import json
from pathlib import Path

import pytest

from agentloom.config import (
    DEFAULT_PORT,
    AppConfig,
    TargetConfig,
    default_config_path,
    default_home,
    default_skills_dir,
    load_config,
)
from agentloom.errors import ConfigError


class TestConstants:
    def test_default_port(self):
        assert DEFAULT_PORT == 41888


class TestPaths:
    def test_default_home(self):
        assert default_home() == Path.home()

    def test_home_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AGENTLOOM_HOME", str(tmp_path))
        assert default_home() == tmp_path

    def test_app_paths(self, tmp_path):
        assert default_config_path(tmp_path) == tmp_path / ".agentloom" / "config.json"
        assert default_skills_dir(tmp_path) == tmp_path / ".agentloom" / "skills"


class TestAppConfig:
    def test_defaults(self, tmp_path):
        config = AppConfig.default(tmp_path)
        assert config.skills_dir == tmp_path / ".agentloom" / "skills"
        assert config.port == DEFAULT_PORT
        assert config.preferences.validate_on_sync
        assert config.targets == {}

    def test_enable_disable(self, tmp_path):
        config = AppConfig.default(tmp_path)
        config.disable_target("codex")
        config.enable_target("gemini")
        assert list(config.enabled_targets()) == ["gemini"]

    def test_save_without_path(self, tmp_path):
        assert AppConfig.default(tmp_path).save() is None

    def test_save_failure_is_config_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        config = AppConfig.default(tmp_path)
        with pytest.raises(ConfigError):
            config.save(blocker / "config.json")


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        config = load_config(home=tmp_path)
        assert config.skills_dir == tmp_path / ".agentloom" / "skills"
        assert config.path == tmp_path / ".agentloom" / "config.json"

    def test_round_trip(self, tmp_path):
        config = AppConfig.default(tmp_path)
        config.path = tmp_path / "config.json"
        config.port = 9999
        config.preferences.auto_migrate = False
        config.targets["claude-code"] = TargetConfig(enabled=False)
        config.targets["folder-x"] = TargetConfig(skills_path=tmp_path / "x", name="X")
        config.save()

        loaded = load_config(tmp_path / "config.json", home=tmp_path)
        assert loaded.port == 9999
        assert loaded.preferences.auto_migrate is False
        assert loaded.targets["claude-code"].enabled is False
        assert loaded.targets["folder-x"].skills_path == tmp_path / "x"
        assert loaded.targets["folder-x"].name == "X"

    def test_save_leaves_no_temp_files(self, tmp_path):
        config = AppConfig.default(tmp_path)
        config.save(tmp_path / "config.json")
        assert [p.name for p in tmp_path.iterdir()] == ["config.json"]

    def test_invalid_json_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        config = load_config(path, home=tmp_path)
        assert config.port == DEFAULT_PORT

    def test_wrong_types_are_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": "high", "targets": {"codex": "on"}}))
        config = load_config(path, home=tmp_path)
        assert config.port == DEFAULT_PORT
        assert config.targets == {}

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AGENTLOOM_SKILLS_DIR", str(tmp_path / "custom"))
        monkeypatch.setenv("AGENTLOOM_PORT", "5555")
        config = load_config(home=tmp_path)
        assert config.skills_dir == tmp_path / "custom"
        assert config.port == 5555

    def test_invalid_port_env_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AGENTLOOM_PORT", "not-a-port")
        assert load_config(home=tmp_path).port == DEFAULT_PORT
