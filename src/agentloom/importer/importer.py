"""Bring skills that live outside central storage under management.

Two sources are supported:

- target directories, where a tool's own skill folders sit next to links the
  sync engine created (those links are excluded; they are already managed);
- an arbitrary folder, which is either a skill itself or a parent of skills.

Imports from a target *move* the skill (copy, then best-effort removal of the
original) so that the next sync can put a link in its place. Imports from a
folder copy only.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from agentloom.errors import AgentLoomError, InvalidSkillNameError, SkillExistsError
from agentloom.importer.models import (
    ConflictInfo,
    ConflictResolution,
    DiscoveredSkill,
    FolderImportSelection,
    ImportResult,
    ImportSelection,
    ScannedSkill,
)
from agentloom.skills.models import SKILL_FILE_NAME, Skill
from agentloom.skills.parser import (
    is_valid_skill_name,
    parse_skill_text,
    to_kebab_case,
    update_name_in_content,
)
from agentloom.skills.store import fix_frontmatter, load_skill_lenient, preview_fixes
from agentloom.sync.engine import is_within
from agentloom.sync.links import LinkOps, default_link_ops
from agentloom.targets.models import Target

logger = logging.getLogger(__name__)


def _import_name(skill: Skill) -> str:
    if is_valid_skill_name(skill.meta.name):
        return skill.meta.name
    return to_kebab_case(skill.meta.name or skill.folder_name)


def _has_skill_file(path: Path) -> bool:
    return path.is_dir() and (path / SKILL_FILE_NAME).is_file()


class Importer:
    def __init__(self, skills_dir: Path, links: LinkOps | None = None) -> None:
        self.skills_dir = skills_dir
        self.links = links or default_link_ops()

    # -- discovery ------------------------------------------------------

    def discover_importable_skills(self, targets: list[Target]) -> list[DiscoveredSkill]:
        """Skills in target dirs that are not links into central storage.

        An unreadable target is logged and skipped; the others are still scanned.
        """
        found: list[DiscoveredSkill] = []
        for target in targets:
            try:
                found.extend(self.scan_target(target))
            except OSError as e:
                logger.warning(f"Failed to scan target '{target.id}': {e}")
        return found

    def scan_target(self, target: Target) -> list[DiscoveredSkill]:
        if not target.skills_dir_exists():
            return []
        found: list[DiscoveredSkill] = []
        for entry in sorted(target.skills_path.iterdir()):
            if self._is_managed(entry) or not _has_skill_file(entry):
                continue
            skill = load_skill_lenient(entry)
            name = _import_name(skill)
            found.append(
                DiscoveredSkill(
                    name=name,
                    description=skill.description,
                    source_path=entry,
                    source_target=target.id,
                    conflict=self.check_conflict(name),
                )
            )
        return found

    def check_conflict(self, name: str) -> ConflictInfo | None:
        existing = self.skills_dir / name
        if not existing.exists():
            return None
        return ConflictInfo(
            existing_path=existing,
            existing_description=load_skill_lenient(existing).description,
        )

    def _is_managed(self, path: Path) -> bool:
        return self.links.is_link(path) and is_within(path, self.skills_dir)

    # -- import ---------------------------------------------------------

    def import_skill(
        self,
        source: Path,
        name: str,
        *,
        overwrite: bool = False,
        remove_source: bool = True,
    ) -> Path:
        """Copy ``source`` to ``<skills_dir>/<name>`` and return the new path.

        With ``overwrite`` an existing central skill is removed first, so the
        result holds exactly the incoming files. The frontmatter name is
        rewritten to match the folder.
        """
        if not is_valid_skill_name(name):
            raise InvalidSkillNameError(name)
        dest = self.skills_dir / name
        if os.path.lexists(dest):
            if not overwrite:
                raise SkillExistsError(name)
            if is_within(source, dest):
                raise SkillExistsError(name)
            if self.links.is_link(dest):
                self.links.remove_link(dest)
            else:
                shutil.rmtree(dest)

        self.skills_dir.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, dest, symlinks=True)
        self._align_name(dest, name)
        logger.info(f"Imported skill '{name}' from {source}")

        if remove_source:
            self._remove_source(source)
        return dest

    def import_selections(self, selections: list[ImportSelection]) -> ImportResult:
        result = ImportResult()
        for selection in selections:
            if selection.resolution == ConflictResolution.SKIP:
                result.skipped.append(selection.name)
                continue
            try:
                self.import_skill(
                    selection.source_path,
                    selection.name,
                    overwrite=selection.resolution == ConflictResolution.OVERWRITE,
                )
            except (AgentLoomError, OSError) as e:
                result.errors.append((selection.name, str(e)))
                continue
            result.imported.append(selection.name)
        return result

    def _align_name(self, dest: Path, name: str) -> None:
        skill_file = dest / SKILL_FILE_NAME
        text = skill_file.read_text(encoding="utf-8")
        outcome = parse_skill_text(text)
        if not outcome.failed and outcome.meta.name == name:
            return
        updated = update_name_in_content(text, name)
        if updated != text:
            skill_file.write_text(updated, encoding="utf-8")

    def _remove_source(self, source: Path) -> None:
        # The copy already succeeded; a leftover original only blocks the next link.
        try:
            if self.links.is_link(source):
                self.links.remove_link(source)
            else:
                shutil.rmtree(source)
        except OSError as e:
            logger.warning(f"Imported but could not remove original at {source}: {e}")

    # -- folder import --------------------------------------------------

    def scan_folder(self, folder: Path) -> list[ScannedSkill]:
        """Skills in ``folder``: the folder itself if it holds SKILL.md, else its children."""
        if not folder.is_dir():
            logger.warning(f"Not a directory: {folder}")
            return []
        if _has_skill_file(folder):
            candidates = [folder]
        else:
            candidates = [
                entry
                for entry in sorted(folder.iterdir())
                if _has_skill_file(entry) and not self._is_managed(entry)
            ]

        scanned: list[ScannedSkill] = []
        for entry in candidates:
            skill = load_skill_lenient(entry)
            try:
                text = (entry / SKILL_FILE_NAME).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                fixes = []
            else:
                fixes = preview_fixes(text, entry.name)
            name = _import_name(skill)
            scanned.append(
                ScannedSkill(
                    name=name,
                    description=skill.description,
                    source_path=entry,
                    needs_fixes=bool(fixes),
                    fixes_preview=fixes,
                    conflict=self.check_conflict(name),
                )
            )
        return scanned

    def import_folder_selections(self, selections: list[FolderImportSelection]) -> ImportResult:
        result = ImportResult()
        for selection in selections:
            if selection.resolution == ConflictResolution.SKIP:
                result.skipped.append(selection.name)
                continue
            try:
                dest = self.import_skill(
                    selection.source_path,
                    selection.name,
                    overwrite=selection.resolution == ConflictResolution.OVERWRITE,
                    remove_source=False,
                )
                if selection.apply_fixes:
                    fix_frontmatter(load_skill_lenient(dest))
            except (AgentLoomError, OSError) as e:
                result.errors.append((selection.name, str(e)))
                continue
            result.imported.append(selection.name)
        return result
