"""Tests for targets/ — tool detection and the target registry."""

from __future__ import annotations

import pytest

from agentloom.config import AppConfig, TargetConfig
from agentloom.errors import (
    TargetError,
    TargetExistsError,
    TargetNotFoundError,
    UnknownTargetTypeError,
)
from agentloom.targets.detector import (
    TOOL_TABLE,
    default_skills_path,
    detect_all,
    detect_target,
    kind_from_id,
)
from agentloom.targets.models import Target, TargetInfo, TargetKind
from agentloom.targets.registry import TargetRegistry


class TestDetector:
    def test_table_covers_every_kind(self):
        assert set(TOOL_TABLE) == set(TargetKind)

    def test_detects_installed_tools_only(self, tmp_path):
        (tmp_path / ".claude").mkdir()
        (tmp_path / ".opencode").mkdir()
        targets = detect_all(tmp_path)
        assert [t.id for t in targets] == ["claude-code", "opencode"]
        assert all(t.auto_detected for t in targets)

    def test_opencode_uses_singular_subdir(self, tmp_path):
        opencode = default_skills_path(TargetKind.OPENCODE, tmp_path)
        assert opencode == tmp_path / ".opencode" / "skill"
        assert default_skills_path(TargetKind.CODEX, tmp_path) == tmp_path / ".codex" / "skills"

    def test_detection_writes_nothing(self, tmp_path):
        (tmp_path / ".codex").mkdir()
        target = detect_target(TargetKind.CODEX, tmp_path)
        assert target is not None
        assert not target.skills_dir_exists()
        assert detect_target(TargetKind.GEMINI, tmp_path) is None

    def test_kind_from_id(self):
        assert kind_from_id("roo-code") == TargetKind.ROO_CODE
        assert kind_from_id("folder-x") is None


class TestTargetModels:
    def test_for_folder(self, tmp_path):
        target = Target.for_folder(tmp_path, "folder-x", "x")
        assert target.kind is None
        assert not target.auto_detected
        assert target.skill_link_path("s") == tmp_path / "s"

    def test_info(self, tmp_path):
        info = TargetInfo.from_target(Target.for_folder(tmp_path / "missing", "f", "F"))
        assert info.exists is False
        assert info.kind is None
        assert info.sync_status is None


def _registry(tmp_path, **targets: TargetConfig) -> tuple[TargetRegistry, AppConfig]:
    home = tmp_path / "home"
    (home / ".claude").mkdir(parents=True)
    config = AppConfig.default(home)
    config.targets.update(targets)
    registry = TargetRegistry(config)
    registry.load()
    return registry, config


class TestTargetRegistryLoad:
    def test_detected_targets(self, tmp_path):
        registry, _ = _registry(tmp_path)
        assert [t.id for t in registry.targets] == ["claude-code"]
        assert registry.get("claude-code").enabled

    def test_config_overrides_detected(self, tmp_path):
        custom = tmp_path / "elsewhere"
        registry, _ = _registry(
            tmp_path, **{"claude-code": TargetConfig(enabled=False, skills_path=custom)}
        )
        target = registry.get("claude-code")
        assert not target.enabled
        assert target.skills_path == custom
        assert registry.enabled() == []

    def test_configured_extras_are_added(self, tmp_path):
        shared = tmp_path / "shared"
        codex = tmp_path / "codex-skills"
        registry, _ = _registry(
            tmp_path,
            **{
                "codex": TargetConfig(skills_path=codex),
                "folder-shared": TargetConfig(skills_path=shared, name="Shared"),
                "dangling": TargetConfig(),
            },
        )
        assert registry.get("codex").kind == TargetKind.CODEX
        folder = registry.get("folder-shared")
        assert folder.name == "Shared"
        assert folder.kind is None
        assert registry.find("dangling") is None

    def test_get_unknown(self, tmp_path):
        registry, _ = _registry(tmp_path)
        with pytest.raises(TargetNotFoundError):
            registry.get("nope")


class TestTargetRegistryMutations:
    def test_toggle_mirrors_config(self, tmp_path):
        registry, config = _registry(tmp_path)
        assert registry.toggle("claude-code") is False
        assert config.targets["claude-code"].enabled is False
        assert registry.toggle("claude-code") is True

    def test_add_custom(self, tmp_path):
        registry, config = _registry(tmp_path)
        path = tmp_path / "codex-skills"
        target = registry.add_custom("codex", path)
        assert target.kind == TargetKind.CODEX
        assert path.is_dir()
        assert config.targets["codex"].skills_path == path

    def test_add_custom_rejects_unknown_and_duplicates(self, tmp_path):
        registry, _ = _registry(tmp_path)
        with pytest.raises(UnknownTargetTypeError):
            registry.add_custom("notepad", tmp_path / "x")
        with pytest.raises(TargetExistsError):
            registry.add_custom("claude-code", tmp_path / "y")

    def test_add_folder_ids_are_unique(self, tmp_path):
        registry, config = _registry(tmp_path)
        first = registry.add_folder(tmp_path / "a" / "My Skills")
        second = registry.add_folder(tmp_path / "b" / "My Skills")
        assert first.id == "folder-my-skills"
        assert second.id == "folder-my-skills-1"
        assert first.name == "My Skills"
        assert config.targets["folder-my-skills-1"].name == "My Skills"

    def test_add_folder_twice_rejected(self, tmp_path):
        registry, _ = _registry(tmp_path)
        registry.add_folder(tmp_path / "shared")
        with pytest.raises(TargetExistsError):
            registry.add_folder(tmp_path / "shared")

    def test_remove_custom(self, tmp_path):
        registry, config = _registry(tmp_path)
        target = registry.add_folder(tmp_path / "shared")
        registry.remove_custom(target.id)
        assert registry.find(target.id) is None
        assert target.id not in config.targets

    def test_remove_auto_detected_refused(self, tmp_path):
        registry, _ = _registry(tmp_path)
        with pytest.raises(TargetError):
            registry.remove_custom("claude-code")

    def test_available_kinds_excludes_present(self, tmp_path):
        registry, _ = _registry(tmp_path)
        ids = [kind_id for kind_id, _ in registry.available_kinds()]
        assert "claude-code" not in ids
        assert "codex" in ids
        assert len(ids) == len(TargetKind) - 1
