"""Target registry: auto-detected targets merged with configured ones."""

from __future__ import annotations

import logging
from pathlib import Path

from agentloom.config import AppConfig
from agentloom.errors import (
    TargetError,
    TargetExistsError,
    TargetNotFoundError,
    UnknownTargetTypeError,
)
from agentloom.skills.parser import to_kebab_case
from agentloom.targets.detector import TOOL_TABLE, detect_all, kind_from_id, make_target
from agentloom.targets.models import Target

logger = logging.getLogger(__name__)


class TargetRegistry:
    """Holds the target list and mirrors every change into ``config.targets``.

    The registry never writes the config file; callers save it afterwards.
    """

    _config: AppConfig
    _targets: list[Target]

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._targets = []

    @property
    def targets(self) -> list[Target]:
        return list(self._targets)

    def load(self) -> list[Target]:
        """Detect installed tools, then apply config overrides and extras."""
        targets = detect_all(self._config.home)
        for target in targets:
            cfg = self._config.targets.get(target.id)
            if cfg is None:
                continue
            target.enabled = cfg.enabled
            if cfg.skills_path is not None:
                target.skills_path = cfg.skills_path

        known_ids = {t.id for t in targets}
        for target_id, cfg in self._config.targets.items():
            if target_id in known_ids or cfg.skills_path is None:
                continue
            kind = kind_from_id(target_id)
            if kind is not None:
                target = make_target(kind, cfg.skills_path)
            else:
                target = Target.for_folder(
                    cfg.skills_path, target_id, cfg.name or cfg.skills_path.name
                )
            target.enabled = cfg.enabled
            targets.append(target)

        self._targets = targets
        logger.debug(f"Loaded {len(targets)} targets")
        return self.targets

    def find(self, target_id: str) -> Target | None:
        for target in self._targets:
            if target.id == target_id:
                return target
        return None

    def get(self, target_id: str) -> Target:
        target = self.find(target_id)
        if target is None:
            raise TargetNotFoundError(target_id)
        return target

    def enabled(self) -> list[Target]:
        return [t for t in self._targets if t.enabled]

    def set_enabled(self, target_id: str, enabled: bool) -> Target:
        target = self.get(target_id)
        target.enabled = enabled
        if enabled:
            self._config.enable_target(target_id)
        else:
            self._config.disable_target(target_id)
        return target

    def toggle(self, target_id: str) -> bool:
        target = self.get(target_id)
        return self.set_enabled(target_id, not target.enabled).enabled

    def add_custom(self, kind_id: str, skills_path: Path) -> Target:
        """Register a known tool at a non-default path."""
        kind = kind_from_id(kind_id)
        if kind is None:
            raise UnknownTargetTypeError(kind_id)
        if self.find(kind_id) is not None:
            raise TargetExistsError(kind_id)

        target = make_target(kind, skills_path)
        target.ensure_skills_dir()
        self._targets.append(target)

        cfg = self._config.get_or_create_target(kind_id)
        cfg.enabled = True
        cfg.skills_path = skills_path
        logger.info(f"Added target {kind_id} at {skills_path}")
        return target

    def add_folder(self, path: Path) -> Target:
        """Register an arbitrary folder; its id is derived from the folder name."""
        if any(t.skills_path == path for t in self._targets):
            raise TargetExistsError(str(path))

        folder_name = path.name or "folder"
        base_id = f"folder-{to_kebab_case(folder_name)}"
        target_id = base_id
        counter = 1
        while self.find(target_id) is not None or kind_from_id(target_id) is not None:
            target_id = f"{base_id}-{counter}"
            counter += 1

        target = Target.for_folder(path, target_id, folder_name)
        target.ensure_skills_dir()
        self._targets.append(target)

        cfg = self._config.get_or_create_target(target_id)
        cfg.enabled = True
        cfg.skills_path = path
        cfg.name = folder_name
        logger.info(f"Added folder target {target_id} at {path}")
        return target

    def remove_custom(self, target_id: str) -> Target:
        target = self.get(target_id)
        if target.auto_detected:
            raise TargetError("Cannot remove auto-detected target. Use disable instead.")
        self._targets = [t for t in self._targets if t.id != target_id]
        self._config.targets.pop(target_id, None)
        logger.info(f"Removed target {target_id}")
        return target

    def available_kinds(self) -> list[tuple[str, str]]:
        """(id, display name) of known tools not yet registered."""
        present = {t.id for t in self._targets}
        return [
            (str(kind), spec.display_name)
            for kind, spec in TOOL_TABLE.items()
            if str(kind) not in present
        ]
