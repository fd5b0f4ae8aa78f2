"""Pydantic models for sync targets."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field


class TargetKind(StrEnum):
    CLAUDE_CODE = "claude-code"
    CODEX = "codex"
    GEMINI = "gemini"
    CURSOR = "cursor"
    AMP = "amp"
    GOOSE = "goose"
    ROO_CODE = "roo-code"
    OPENCODE = "opencode"
    VIBE = "vibe"
    FIREBENDER = "firebender"
    MUX = "mux"
    AUTOHAND = "autohand"


class ToolSpec(BaseModel):
    """Where a tool keeps its skills, relative to the user's home directory."""

    display_name: str
    config_dir: str
    skills_subdir: str = "skills"


class SyncStatus(BaseModel):
    is_synced: bool
    missing_skills: list[str] = Field(default_factory=list)
    extra_items: list[str] = Field(default_factory=list)
    broken_links: list[str] = Field(default_factory=list)


class Target(BaseModel):
    id: str
    name: str
    skills_path: Path
    enabled: bool = True
    auto_detected: bool = False
    # None for arbitrary custom folders.
    kind: TargetKind | None = None

    @classmethod
    def for_folder(cls, path: Path, target_id: str, display_name: str) -> Target:
        return cls(id=target_id, name=display_name, skills_path=path)

    def skills_dir_exists(self) -> bool:
        return self.skills_path.is_dir()

    def ensure_skills_dir(self) -> None:
        self.skills_path.mkdir(parents=True, exist_ok=True)

    def skill_link_path(self, skill_name: str) -> Path:
        return self.skills_path / skill_name


class TargetInfo(BaseModel):
    id: str
    name: str
    skills_path: str
    auto_detected: bool
    enabled: bool
    exists: bool
    kind: str | None = None
    sync_status: SyncStatus | None = None

    @classmethod
    def from_target(cls, target: Target, sync_status: SyncStatus | None = None) -> TargetInfo:
        return cls(
            id=target.id,
            name=target.name,
            skills_path=str(target.skills_path),
            auto_detected=target.auto_detected,
            enabled=target.enabled,
            exists=target.skills_dir_exists(),
            kind=str(target.kind) if target.kind else None,
            sync_status=sync_status,
        )
