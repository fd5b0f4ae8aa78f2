"""SkillManager: the facade hosts (HTTP server, tests, scripts) talk to.

Holds the in-memory skill and target lists and wires the store, validator,
target registry, sync engine and importer together. Single-entity operations
raise ``AgentLoomError`` subclasses; batch operations return reports.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from agentloom.config import AppConfig, load_config
from agentloom.errors import LinkError, SkillNotFoundError
from agentloom.importer import (
    ConflictResolution,
    DiscoveredSkill,
    FolderImportSelection,
    ImportResult,
    ImportSelection,
    Importer,
    ScannedSkill,
)
from agentloom.skills import Skill, SkillStore, Validator
from agentloom.skills.parser import extract_name_from_content, is_valid_skill_name
from agentloom.skills.store import fix_frontmatter, read_raw_content, save_content
from agentloom.sync import LinkOps, SyncEngine, SyncResult, default_link_ops
from agentloom.targets import Target, TargetInfo, TargetRegistry

logger = logging.getLogger(__name__)


class ManagerStats(BaseModel):
    total_skills: int
    valid_skills: int
    invalid_skills: int
    total_targets: int
    enabled_targets: int


class SkillManager:
    def __init__(self, config: AppConfig, *, links: LinkOps | None = None) -> None:
        links = links or default_link_ops()
        prefs = config.preferences
        self.config = config
        self.store = SkillStore(config.skills_dir)
        self.registry = TargetRegistry(config)
        self.engine = SyncEngine(
            links,
            remove_stale=prefs.remove_stale,
            auto_migrate=prefs.auto_migrate,
        )
        self.validator = Validator(require_content=prefs.require_content)
        self.importer = Importer(config.skills_dir, links)
        self._skills: list[Skill] = []

    @classmethod
    def load(cls, config: AppConfig | None = None, *, links: LinkOps | None = None) -> SkillManager:
        """Build a manager and run the initial skill and target scans."""
        manager = cls(config or load_config(), links=links)
        manager.store.ensure_root()
        manager.refresh_skills()
        manager.refresh_targets()
        return manager

    # -- skills ---------------------------------------------------------

    def skills(self) -> list[Skill]:
        return list(self._skills)

    def get_skill(self, name: str) -> Skill:
        for skill in self._skills:
            if skill.folder_name == name:
                return skill
        for skill in self._skills:
            if skill.name == name:
                return skill
        raise SkillNotFoundError(name)

    def refresh_skills(self) -> list[Skill]:
        self._skills = self.store.discover()
        self.validator.validate_all(self._skills)
        return self.skills()

    def validate_skill(self, name: str) -> Skill:
        """Validate one skill; raises ValidationFailedError when it is invalid."""
        skill = self.get_skill(name)
        self.validator.check(skill)
        return skill

    def validate_all(self) -> dict[str, list[str]]:
        """Re-validate every skill. Returns the errors of the invalid ones."""
        self.validator.validate_all(self._skills)
        return {s.folder_name: list(s.validation_errors) for s in self._skills if not s.is_valid}

    def create_skill(self, name: str, description: str) -> Skill:
        skill = self.store.create(name, description)
        self.validator.validate(skill)
        self._skills.append(skill)
        self._skills.sort(key=lambda s: s.folder_name)
        return skill

    def rename_skill(self, old_name: str, new_name: str) -> Skill:
        """Rename the skill folder and frontmatter, then move its links."""
        skill = self.get_skill(old_name)
        # The frontmatter name may already have changed (save_skill_content).
        old_link_names = {skill.name, skill.folder_name}
        renamed = self.store.rename(skill.folder_name, new_name)
        self.validator.validate(renamed)
        self._skills = [renamed if s is skill else s for s in self._skills]
        self._skills.sort(key=lambda s: s.folder_name)

        for target in self.registry.targets:
            for link_name in old_link_names:
                self.engine.unlink_skill(target, link_name)
        if self._is_syncable(renamed):
            self._link_everywhere(renamed)
        return renamed

    def delete_skill(self, name: str) -> None:
        """Remove the skill's links from every target, then its storage folder."""
        skill = self.get_skill(name)
        # Links made before an out-of-band name edit still carry the folder name.
        link_names = {skill.name, skill.folder_name}
        for target in self.registry.targets:
            for link_name in link_names:
                self.engine.unlink_skill(target, link_name)
        self.store.delete(skill.folder_name)
        self._skills = [s for s in self._skills if s is not skill]

    def get_skill_content(self, name: str) -> str:
        return read_raw_content(self.get_skill(name))

    def save_skill_content(self, name: str, content: str) -> Skill:
        """Write SKILL.md; a changed frontmatter name renames the folder too."""
        skill = self.get_skill(name)
        save_content(skill, content)

        new_name = extract_name_from_content(content)
        if new_name and new_name != skill.folder_name and is_valid_skill_name(new_name):
            if self.store.path_for(new_name).exists():
                logger.warning(
                    f"Not renaming '{skill.folder_name}' to '{new_name}': "
                    "a skill with that name exists"
                )
            else:
                return self.rename_skill(skill.folder_name, new_name)

        self.validator.validate(skill)
        return skill

    def fix_skill(self, name: str) -> list[str]:
        skill = self.get_skill(name)
        fixes = fix_frontmatter(skill)
        self.validator.validate(skill)
        return fixes

    def fix_all_skills(self) -> dict[str, list[str]]:
        """Repair every skill reporting fixable problems. Returns the fixes per skill."""
        fixed: dict[str, list[str]] = {}
        for skill in self._skills:
            if not skill.has_fixable_errors():
                continue
            try:
                fixes = fix_frontmatter(skill)
            except OSError as e:
                logger.warning(f"Failed to fix '{skill.folder_name}': {e}")
                continue
            if fixes:
                fixed[skill.folder_name] = fixes
            self.validator.validate(skill)
        return fixed

    # -- targets --------------------------------------------------------

    def targets(self) -> list[Target]:
        return self.registry.targets

    def refresh_targets(self) -> list[Target]:
        return self.registry.load()

    def target_infos(self) -> list[TargetInfo]:
        skills = self._syncable_skills()
        return [
            TargetInfo.from_target(t, self.engine.inspect(t, skills)) for t in self.registry.targets
        ]

    def toggle_target(self, target_id: str) -> bool:
        enabled = self.registry.toggle(target_id)
        self.config.save()
        return enabled

    def set_target_enabled(self, target_id: str, enabled: bool) -> Target:
        target = self.registry.set_enabled(target_id, enabled)
        self.config.save()
        return target

    def add_custom_target(self, kind_id: str, skills_path: Path) -> Target:
        target = self.registry.add_custom(kind_id, skills_path)
        self.config.save()
        return target

    def add_folder_as_target(self, path: Path) -> Target:
        target = self.registry.add_folder(path)
        self.config.save()
        return target

    def remove_custom_target(self, target_id: str) -> Target:
        """Unregister a custom target and remove the links it holds into central storage."""
        target = self.registry.remove_custom(target_id)
        self.config.save()
        try:
            removed = self.engine.remove_all_links(target, within=self.store.root)
        except (LinkError, OSError) as e:
            logger.warning(f"Removed target {target_id} but failed to clean its links: {e}")
        else:
            logger.info(f"Removed {len(removed)} links from {target.skills_path}")
        return target

    def available_target_types(self) -> list[tuple[str, str]]:
        return self.registry.available_kinds()

    # -- sync -----------------------------------------------------------

    def sync_all(self) -> list[SyncResult]:
        return self.engine.sync_all(self.registry.enabled(), self._syncable_skills())

    def sync_target(self, target_id: str) -> SyncResult:
        target = self.registry.get(target_id)
        return self.engine.sync_target(target, self._syncable_skills())

    def _is_syncable(self, skill: Skill) -> bool:
        return skill.is_valid or not self.config.preferences.validate_on_sync

    def _syncable_skills(self) -> list[Skill]:
        return [s for s in self._skills if self._is_syncable(s)]

    def _link_everywhere(self, skill: Skill) -> None:
        for target in self.registry.enabled():
            try:
                target.ensure_skills_dir()
                self.engine.link_skill(target, skill)
            except (LinkError, OSError) as e:
                logger.warning(f"[{target.id}] Failed to link '{skill.name}': {e}")

    # -- import ---------------------------------------------------------

    def discover_importable_skills(self) -> list[DiscoveredSkill]:
        return self.importer.discover_importable_skills(self.registry.targets)

    def import_skills(self, selections: list[ImportSelection]) -> ImportResult:
        """Import from targets, then refresh, validate and sync so links replace the originals."""
        result = self.importer.import_selections(selections)
        return self._after_import(result)

    def import_all_skills(self) -> ImportResult:
        """Import every discovered skill that does not clash with an existing one."""
        selections: list[ImportSelection] = []
        seen: set[str] = set()
        for found in self.discover_importable_skills():
            clash = found.has_conflict or found.name in seen
            seen.add(found.name)
            selections.append(
                ImportSelection(
                    name=found.name,
                    source_path=found.source_path,
                    resolution=ConflictResolution.SKIP if clash else ConflictResolution.IMPORT,
                )
            )
        return self.import_skills(selections)

    def scan_folder(self, folder: Path) -> list[ScannedSkill]:
        return self.importer.scan_folder(folder)

    def import_from_folder(self, selections: list[FolderImportSelection]) -> ImportResult:
        result = self.importer.import_folder_selections(selections)
        return self._after_import(result)

    def _after_import(self, result: ImportResult) -> ImportResult:
        if result.imported:
            self.refresh_skills()
            result.synced_to = len(self.sync_all())
        return result

    # -- stats ----------------------------------------------------------

    def stats(self) -> ManagerStats:
        valid = sum(1 for s in self._skills if s.is_valid)
        return ManagerStats(
            total_skills=len(self._skills),
            valid_skills=valid,
            invalid_skills=len(self._skills) - valid,
            total_targets=len(self.registry.targets),
            enabled_targets=len(self.registry.enabled()),
        )
