"""Tests for skills/store.py — strict/lenient loading, discovery and edits."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentloom.errors import (
    FrontmatterError,
    InvalidSkillNameError,
    MissingSkillFileError,
    SkillExistsError,
    SkillNotFoundError,
)
from agentloom.skills.models import FIXABLE_MARKER, ValidationStatus
from agentloom.skills.parser import PLACEHOLDER_DESCRIPTION
from agentloom.skills.store import (
    SkillStore,
    create_skill,
    discover_skills,
    fix_frontmatter,
    load_skill,
    load_skill_lenient,
    preview_fixes,
    read_raw_content,
    save_content,
)


def _write_skill(
    root: Path,
    slug: str,
    frontmatter: dict[str, str] | None = None,
    body: str = "Do the thing.",
) -> Path:
    """Helper: create root/<slug>/SKILL.md and return the skill directory."""
    if frontmatter is None:
        frontmatter = {"name": slug, "description": f"Desc for {slug}"}
    skill_dir = root / slug
    skill_dir.mkdir(parents=True, exist_ok=True)
    lines = ["---"]
    for k, v in frontmatter.items():
        lines.append(f"{k}: {v}")
    lines.append("---")
    lines.append("")
    lines.append(body)
    (skill_dir / "SKILL.md").write_text("\n".join(lines))
    return skill_dir


def _write_raw(root: Path, slug: str, text: str) -> Path:
    skill_dir = root / slug
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(text)
    return skill_dir


class TestLoadSkill:
    def test_loads_valid_skill(self, tmp_path):
        skill_dir = _write_skill(tmp_path, "run-tests")
        skill = load_skill(skill_dir)
        assert skill.name == "run-tests"
        assert skill.description == "Desc for run-tests"
        assert skill.content == "Do the thing."
        assert skill.folder_name == "run-tests"
        assert skill.validation_status == ValidationStatus.UNKNOWN

    def test_missing_skill_file(self, tmp_path):
        (tmp_path / "empty").mkdir()
        with pytest.raises(MissingSkillFileError):
            load_skill(tmp_path / "empty")

    def test_unclosed_frontmatter_raises(self, tmp_path):
        skill_dir = _write_raw(tmp_path, "broken", "---\nname: broken\n")
        with pytest.raises(FrontmatterError):
            load_skill(skill_dir)

    def test_structural_type_error_raises(self, tmp_path):
        skill_dir = _write_raw(tmp_path, "listy", "---\nname: [a, b]\ndescription: d\n---\nx")
        with pytest.raises(FrontmatterError):
            load_skill(skill_dir)


class TestLoadSkillLenient:
    def test_valid_skill_matches_strict_load(self, tmp_path):
        skill_dir = _write_skill(tmp_path, "ok-skill")
        assert load_skill_lenient(skill_dir).meta == load_skill(skill_dir).meta

    def test_missing_frontmatter_is_fixable(self, tmp_path):
        skill_dir = _write_raw(tmp_path, "plain", "Just text")
        skill = load_skill_lenient(skill_dir)
        assert skill.name == "plain"
        assert skill.validation_status == ValidationStatus.INVALID
        assert skill.has_fixable_errors()
        assert any("Added missing frontmatter" in d for d in skill.diagnostics)

    def test_broken_field_falls_back_to_extraction(self, tmp_path):
        skill_dir = _write_raw(
            tmp_path, "listy", "---\nname: [a, b]\ndescription: desc\n---\nbody"
        )
        skill = load_skill_lenient(skill_dir)
        assert skill.description == "desc"
        assert skill.content == "body"
        assert skill.validation_status == ValidationStatus.INVALID
        assert skill.has_fixable_errors()

    def test_unreadable_file_uses_folder_name(self, tmp_path):
        skill_dir = tmp_path / "binary"
        skill_dir.mkdir()
        (skill_dir / "SKILL.md").write_bytes(b"\xff\xfe\xfa")
        skill = load_skill_lenient(skill_dir)
        assert skill.name == "binary"
        assert skill.validation_status == ValidationStatus.INVALID
        assert skill.validation_errors

    def test_coerced_metadata_is_kept_as_diagnostic(self, tmp_path):
        skill_dir = _write_raw(
            tmp_path, "meta", "---\nname: meta\ndescription: d\nmetadata:\n  n: 1\n---\nbody"
        )
        skill = load_skill_lenient(skill_dir)
        assert skill.meta.metadata == {"n": "1"}
        assert any(FIXABLE_MARKER in d for d in skill.diagnostics)


class TestDiscoverSkills:
    def test_sorted_and_lenient(self, tmp_path):
        _write_skill(tmp_path, "zeta")
        _write_skill(tmp_path, "alpha")
        _write_raw(tmp_path, "broken", "---\nname: broken\n")
        (tmp_path / "not-a-skill").mkdir()
        (tmp_path / "README.md").write_text("hi")

        skills = discover_skills(tmp_path)
        assert [s.folder_name for s in skills] == ["alpha", "broken", "zeta"]
        assert skills[1].validation_status == ValidationStatus.INVALID

    def test_missing_root(self, tmp_path):
        assert discover_skills(tmp_path / "nope") == []


class TestCreateSkill:
    def test_create_then_load_round_trip(self, tmp_path):
        created = create_skill(tmp_path, "My New Skill", "Helps with things")
        assert created.path == tmp_path / "my-new-skill"
        loaded = load_skill(created.path)
        assert loaded.meta == created.meta
        assert loaded.name == "my-new-skill"
        assert loaded.description == "Helps with things"
        assert loaded.content.strip()

    def test_existing_name_raises(self, tmp_path):
        create_skill(tmp_path, "dup", "first")
        with pytest.raises(SkillExistsError):
            create_skill(tmp_path, "dup", "second")


class TestSaveContent:
    def test_valid_content_updates_meta(self, tmp_path):
        skill = load_skill(_write_skill(tmp_path, "edit-me"))
        save_content(skill, "---\nname: edit-me\ndescription: Updated\n---\n\nNew body\n")
        assert skill.description == "Updated"
        assert skill.content == "New body"
        assert read_raw_content(skill).startswith("---\nname: edit-me")

    def test_broken_content_is_still_written(self, tmp_path):
        skill = load_skill(_write_skill(tmp_path, "edit-me"))
        save_content(skill, "---\nname: edit-me\n")
        assert read_raw_content(skill) == "---\nname: edit-me\n"
        assert skill.validation_status == ValidationStatus.INVALID
        assert skill.description == "Desc for edit-me"


class TestFixFrontmatter:
    def test_adds_missing_frontmatter(self, tmp_path):
        skill_dir = _write_raw(tmp_path, "plain", "Just text")
        fixes = fix_frontmatter(load_skill_lenient(skill_dir))
        assert fixes == ["Added missing frontmatter"]
        fixed = load_skill(skill_dir)
        assert fixed.name == "plain"
        assert fixed.description == PLACEHOLDER_DESCRIPTION
        assert fixed.content == "Just text"

    def test_normalizes_invalid_name(self, tmp_path):
        skill_dir = _write_skill(tmp_path, "my-skill", {"name": "My Skill", "description": "d"})
        fixes = fix_frontmatter(load_skill_lenient(skill_dir))
        assert fixes == ["Converted name 'My Skill' to kebab-case 'my-skill'"]
        fixed = load_skill(skill_dir)
        assert fixed.name == "my-skill"
        assert fixed.content == "Do the thing."

    def test_unclosed_block_is_left_alone(self, tmp_path):
        skill_dir = _write_raw(tmp_path, "open", "---\nname: open\n")
        assert fix_frontmatter(load_skill_lenient(skill_dir)) == []
        assert (skill_dir / "SKILL.md").read_text() == "---\nname: open\n"

    def test_clean_skill_needs_nothing(self, tmp_path):
        skill_dir = _write_skill(tmp_path, "clean")
        assert fix_frontmatter(load_skill(skill_dir)) == []

    def test_preview_matches_fix(self, tmp_path):
        assert preview_fixes("Just text", "plain") == ["Added missing frontmatter"]
        assert preview_fixes("---\nname: x\n", "x") == []
        assert preview_fixes("---\nname: x\n---\n", "x") == ["Added missing description field"]


class TestSkillStore:
    def test_load_missing(self, tmp_path):
        with pytest.raises(SkillNotFoundError):
            SkillStore(tmp_path).load("ghost")

    def test_rename_moves_folder_and_name(self, tmp_path):
        store = SkillStore(tmp_path)
        store.create("old-name", "d")
        renamed = store.rename("old-name", "new-name")
        assert not (tmp_path / "old-name").exists()
        assert renamed.path == tmp_path / "new-name"
        assert renamed.name == "new-name"
        assert load_skill(tmp_path / "new-name").name == "new-name"

    def test_rename_refuses_existing(self, tmp_path):
        store = SkillStore(tmp_path)
        store.create("a", "d")
        store.create("b", "d")
        with pytest.raises(SkillExistsError):
            store.rename("a", "b")

    def test_rename_refuses_invalid_name(self, tmp_path):
        store = SkillStore(tmp_path)
        store.create("a", "d")
        with pytest.raises(InvalidSkillNameError):
            store.rename("a", "Not Valid")

    def test_delete(self, tmp_path):
        store = SkillStore(tmp_path)
        store.create("gone", "d")
        store.delete("gone")
        assert not (tmp_path / "gone").exists()
        with pytest.raises(SkillNotFoundError):
            store.delete("gone")
