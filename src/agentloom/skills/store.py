"""Skill storage: strict/lenient loading, discovery and on-disk edits."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from agentloom.errors import (
    FrontmatterError,
    InvalidSkillNameError,
    MissingSkillFileError,
    SkillExistsError,
    SkillNotFoundError,
)
from agentloom.skills.models import (
    FIXABLE_MARKER,
    SKILL_FILE_NAME,
    Skill,
    SkillMeta,
    ValidationStatus,
)
from agentloom.skills.parser import (
    PLACEHOLDER_DESCRIPTION,
    FrontmatterSplitError,
    dump_frontmatter,
    extract_fields,
    is_valid_skill_name,
    normalize_frontmatter,
    parse_skill_text,
    render_skill_file,
    render_template,
    split_frontmatter,
    to_kebab_case,
    update_name_in_content,
)

logger = logging.getLogger(__name__)


def load_skill(skill_dir: Path) -> Skill:
    """Load a skill strictly. Raises MissingSkillFileError or FrontmatterError."""
    skill_file = skill_dir / SKILL_FILE_NAME
    if not skill_file.is_file():
        raise MissingSkillFileError(skill_dir)
    try:
        text = skill_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FrontmatterError(skill_file, f"Cannot read {SKILL_FILE_NAME}: {e}") from e

    outcome = parse_skill_text(text)
    if outcome.failed:
        raise FrontmatterError(skill_file, outcome.error or "unknown parse error")
    return Skill(
        meta=outcome.meta,
        content=outcome.content,
        path=skill_dir,
        diagnostics=outcome.diagnostics,
    )


def load_skill_lenient(skill_dir: Path) -> Skill:
    """Load a skill without ever raising.

    Broken skills come back with their problems recorded as diagnostics so
    they stay visible (with an error badge) instead of vanishing from discovery.
    """
    folder_name = skill_dir.name or "unknown"
    skill_file = skill_dir / SKILL_FILE_NAME
    try:
        text = skill_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        message = f"Cannot read {SKILL_FILE_NAME}: {e}"
        return Skill(
            meta=SkillMeta(name=folder_name, description=f"Failed to read: {e}"),
            path=skill_dir,
            validation_status=ValidationStatus.INVALID,
            validation_errors=[message],
            diagnostics=[message],
        )

    outcome = parse_skill_text(text)
    if not outcome.failed:
        return Skill(
            meta=outcome.meta,
            content=outcome.content,
            path=skill_dir,
            diagnostics=outcome.diagnostics,
        )

    diagnostics = [str(FrontmatterError(skill_file, outcome.error or "unknown parse error"))]
    try:
        block, body = split_frontmatter(text)
    except FrontmatterSplitError as e:
        if e.unclosed:
            block, body = text.lstrip()[3:], ""
        else:
            block, body = "", text
            diagnostics.append(f"Frontmatter {FIXABLE_MARKER}: Added missing frontmatter")

    if block:
        preview = normalize_frontmatter(block, folder_name)
        if preview.was_modified:
            diagnostics.append(f"Frontmatter {FIXABLE_MARKER}: {', '.join(preview.fixes)}")

    fields = extract_fields(block)
    return Skill(
        meta=SkillMeta(
            name=fields.get("name") or folder_name,
            description=fields.get("description", ""),
        ),
        content=body,
        path=skill_dir,
        validation_status=ValidationStatus.INVALID,
        validation_errors=list(diagnostics),
        diagnostics=diagnostics,
    )


def discover_skills(root: Path) -> list[Skill]:
    """Leniently load every ``<root>/<dir>/SKILL.md``, sorted by folder name."""
    if not root.is_dir():
        return []
    skills: list[Skill] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir() or not (entry / SKILL_FILE_NAME).is_file():
            continue
        skill = load_skill_lenient(entry)
        if skill.diagnostics:
            logger.warning(
                f"Skill '{skill.folder_name}' has errors: {'; '.join(skill.diagnostics)}"
            )
        skills.append(skill)
    return skills


def create_skill(root: Path, name: str, description: str) -> Skill:
    """Create ``<root>/<kebab(name)>/SKILL.md`` from the default template."""
    canonical = to_kebab_case(name)
    skill_dir = root / canonical
    if skill_dir.exists():
        raise SkillExistsError(canonical)
    skill_dir.mkdir(parents=True)
    (skill_dir / SKILL_FILE_NAME).write_text(
        render_template(canonical, description), encoding="utf-8"
    )
    logger.info(f"Created skill '{canonical}' at {skill_dir}")
    return load_skill(skill_dir)


def read_raw_content(skill: Skill) -> str:
    return skill.skill_file.read_text(encoding="utf-8")


def save_content(skill: Skill, content: str) -> None:
    """Write SKILL.md and re-parse it into ``skill``.

    The file is always written so work in progress is never lost; when the
    new text does not parse, the old metadata is kept and the skill is
    marked invalid.
    """
    skill.skill_file.write_text(content, encoding="utf-8")
    outcome = parse_skill_text(content)
    if outcome.failed:
        message = str(FrontmatterError(skill.skill_file, outcome.error or "unknown parse error"))
        skill.content = content
        skill.validation_status = ValidationStatus.INVALID
        skill.validation_errors = [message]
        skill.diagnostics = [message]
        return
    skill.meta = outcome.meta
    skill.content = outcome.content
    skill.validation_status = ValidationStatus.UNKNOWN
    skill.validation_errors = []
    skill.diagnostics = list(outcome.diagnostics)


def preview_fixes(text: str, folder_name: str) -> list[str]:
    """The fixes ``fix_frontmatter`` would apply to ``text``, without writing anything."""
    try:
        block, _ = split_frontmatter(text)
    except FrontmatterSplitError as e:
        return [] if e.unclosed else ["Added missing frontmatter"]
    return normalize_frontmatter(block, folder_name).fixes


def fix_frontmatter(skill: Skill) -> list[str]:
    """Repair the skill's metadata block in place. Returns the fixes applied."""
    text = read_raw_content(skill)
    try:
        block, body = split_frontmatter(text)
    except FrontmatterSplitError as e:
        if e.unclosed:
            # Cannot tell where metadata ends; leave the file alone.
            return []
        header = dump_frontmatter(
            {
                "name": skill.folder_name,
                "description": skill.description or PLACEHOLDER_DESCRIPTION,
            }
        )
        save_content(skill, render_skill_file(header, text.strip()))
        logger.info(f"Added missing frontmatter to '{skill.folder_name}'")
        return ["Added missing frontmatter"]

    result = normalize_frontmatter(block, skill.folder_name)
    if not result.was_modified:
        return []
    save_content(skill, render_skill_file(result.yaml, body))
    logger.info(f"Fixed frontmatter of '{skill.folder_name}': {', '.join(result.fixes)}")
    return result.fixes


class SkillStore:
    """The central skills directory: ``<root>/<skill-name>/SKILL.md``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, name: str) -> Path:
        return self._root / name

    def ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def discover(self) -> list[Skill]:
        return discover_skills(self._root)

    def load(self, name: str) -> Skill:
        skill_dir = self.path_for(name)
        if not skill_dir.is_dir():
            raise SkillNotFoundError(skill_dir)
        return load_skill(skill_dir)

    def create(self, name: str, description: str) -> Skill:
        return create_skill(self._root, name, description)

    def rename(self, old_name: str, new_name: str) -> Skill:
        """Move the skill folder and rewrite the frontmatter name to match."""
        if not is_valid_skill_name(new_name):
            raise InvalidSkillNameError(new_name)
        old_path = self.path_for(old_name)
        new_path = self.path_for(new_name)
        if not old_path.is_dir():
            raise SkillNotFoundError(old_path)
        if new_path.exists():
            raise SkillExistsError(new_name)

        old_path.rename(new_path)
        skill = load_skill_lenient(new_path)
        if skill.name != new_name:
            text = (new_path / SKILL_FILE_NAME).read_text(encoding="utf-8")
            save_content(skill, update_name_in_content(text, new_name))
        logger.info(f"Renamed skill '{old_name}' to '{new_name}'")
        return skill

    def delete(self, name: str) -> None:
        skill_dir = self.path_for(name)
        if not skill_dir.exists():
            raise SkillNotFoundError(skill_dir)
        shutil.rmtree(skill_dir)
        logger.info(f"Deleted skill '{name}'")
