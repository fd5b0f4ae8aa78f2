"""Link reconciliation between the central skills directory and each target.

For every skill the engine makes ``<target>/<skill.name>`` a link to the
skill's storage directory, then (optionally) removes links whose name no
longer matches a skill. A second run over unchanged state touches nothing
and reports every skill as unchanged.

Failures never escape a sync call: per-skill problems are recorded against
the skill, directory problems against the target, and the result is always
returned.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from agentloom.errors import LinkError, NotALinkError
from agentloom.skills.models import Skill
from agentloom.sync.links import LinkOps, default_link_ops
from agentloom.sync.models import LinkAction, SyncResult
from agentloom.targets.models import SyncStatus, Target

logger = logging.getLogger(__name__)


def _same_path(a: Path, b: Path) -> bool:
    if os.path.normcase(os.path.normpath(a)) == os.path.normcase(os.path.normpath(b)):
        return True
    return os.path.normcase(os.path.realpath(a)) == os.path.normcase(os.path.realpath(b))


def is_within(path: Path, root: Path) -> bool:
    """True if ``path`` resolves to ``root`` or somewhere below it."""
    try:
        return path.resolve().is_relative_to(root.resolve())
    except OSError:
        return False


class SyncEngine:
    def __init__(
        self,
        links: LinkOps | None = None,
        *,
        remove_stale: bool = True,
        create_dirs: bool = True,
        auto_migrate: bool = True,
    ) -> None:
        self.links = links or default_link_ops()
        self.remove_stale = remove_stale
        self.create_dirs = create_dirs
        # Replace real folders/files sitting where a link belongs; the central
        # copy is authoritative.
        self.auto_migrate = auto_migrate

    def sync_target(self, target: Target, skills: list[Skill]) -> SyncResult:
        result = SyncResult.for_target(target)
        if not target.enabled:
            return result

        if self.create_dirs:
            try:
                target.ensure_skills_dir()
            except OSError as e:
                result.add_error(None, f"Failed to create skills directory: {e}")
                return result
        elif not target.skills_dir_exists():
            result.add_error(None, f"Skills directory does not exist: {target.skills_path}")
            return result

        names: set[str] = set()
        for skill in skills:
            names.add(skill.name)
            try:
                action = self.link_skill(target, skill)
            except (LinkError, OSError) as e:
                result.add_error(skill.name, str(e))
                continue
            if action == LinkAction.UNCHANGED:
                result.unchanged.append(skill.name)
                continue
            result.created.append(skill.name)
            if action == LinkAction.MIGRATED:
                note = f"Migrated '{skill.name}': removed original folder, created symlink"
                result.notes.append(note)
                logger.info(f"[{target.id}] {note}")

        if self.remove_stale:
            try:
                self._remove_stale_links(target, names, result)
            except OSError as e:
                result.add_error(None, f"Failed to clean stale symlinks: {e}")

        logger.info(
            f"Synced {target.id}: {len(result.created)} created, "
            f"{len(result.removed)} removed, {len(result.unchanged)} unchanged, "
            f"{len(result.errors)} errors"
        )
        return result

    def sync_all(self, targets: list[Target], skills: list[Skill]) -> list[SyncResult]:
        return [self.sync_target(target, skills) for target in targets]

    def link_skill(self, target: Target, skill: Skill) -> LinkAction:
        """Make ``<target>/<skill.name>`` link to the skill. Raises LinkError."""
        link_path = target.skill_link_path(skill.name)
        source = skill.path.absolute()

        if not os.path.lexists(link_path):
            self._create_link(source, link_path)
            return LinkAction.CREATED

        if self.links.is_link(link_path):
            if self._points_to(link_path, source):
                return LinkAction.UNCHANGED
            self._remove_link(link_path)
            self._create_link(source, link_path)
            return LinkAction.CREATED

        if not self.auto_migrate:
            raise NotALinkError(link_path)

        kind = "folder" if link_path.is_dir() else "file"
        try:
            if kind == "folder":
                shutil.rmtree(link_path)
            else:
                link_path.unlink()
        except OSError as e:
            raise LinkError(
                f"Failed to remove existing {kind} for migration at {link_path}: {e}"
            ) from e
        self._create_link(source, link_path)
        return LinkAction.MIGRATED

    def unlink_skill(self, target: Target, name: str) -> bool:
        """Remove the link for ``name`` if one exists. Real folders are left alone."""
        link_path = target.skill_link_path(name)
        if not self.links.is_link(link_path):
            return False
        self._remove_link(link_path)
        return True

    def remove_all_links(self, target: Target, *, within: Path | None = None) -> list[str]:
        """Remove every link in the target dir, or only those resolving under ``within``."""
        if not target.skills_dir_exists():
            return []
        removed: list[str] = []
        for entry in sorted(target.skills_path.iterdir()):
            if not self.links.is_link(entry):
                continue
            if within is not None and not is_within(entry, within):
                continue
            self._remove_link(entry)
            removed.append(entry.name)
        return removed

    def inspect(self, target: Target, skills: list[Skill]) -> SyncStatus:
        """Read-only comparison of the target dir against ``skills``."""
        names = {s.name for s in skills}
        if not target.skills_dir_exists():
            return SyncStatus(is_synced=not names, missing_skills=sorted(names))

        missing = []
        for skill in skills:
            link_path = target.skill_link_path(skill.name)
            if not self.links.is_link(link_path) or not self._points_to(
                link_path, skill.path.absolute()
            ):
                missing.append(skill.name)

        extra: list[str] = []
        broken: list[str] = []
        for entry in sorted(target.skills_path.iterdir()):
            if not self.links.is_link(entry):
                continue
            if not entry.exists():
                broken.append(entry.name)
            elif entry.name not in names:
                extra.append(entry.name)

        return SyncStatus(
            is_synced=not (missing or extra or broken),
            missing_skills=sorted(missing),
            extra_items=extra,
            broken_links=broken,
        )

    def _points_to(self, link_path: Path, source: Path) -> bool:
        try:
            current = self.links.read_link_target(link_path)
        except OSError:
            return False
        if not current.is_absolute():
            current = link_path.parent / current
        return _same_path(current, source)

    def _create_link(self, source: Path, link_path: Path) -> None:
        try:
            self.links.create_link(source, link_path)
        except OSError as e:
            raise LinkError(
                f"Failed to create symlink from {source} to {link_path}: {e}"
            ) from e

    def _remove_link(self, link_path: Path) -> None:
        try:
            self.links.remove_link(link_path)
        except OSError as e:
            raise LinkError(f"Failed to remove symlink at {link_path}: {e}") from e

    def _remove_stale_links(self, target: Target, names: set[str], result: SyncResult) -> None:
        # Only links are candidates; real folders may be user data with a clashing name.
        for entry in sorted(target.skills_path.iterdir()):
            if entry.name in names or not self.links.is_link(entry):
                continue
            try:
                self._remove_link(entry)
            except LinkError as e:
                result.add_error(entry.name, str(e))
                continue
            result.removed.append(entry.name)
