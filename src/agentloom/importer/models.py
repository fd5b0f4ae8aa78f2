"""Pydantic models for importing external skills into central storage."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field


class ConflictResolution(StrEnum):
    IMPORT = "import"
    SKIP = "skip"
    # Replace the central copy (remove, then copy); never a merge.
    OVERWRITE = "overwrite"


class ConflictInfo(BaseModel):
    existing_path: Path
    existing_description: str


class DiscoveredSkill(BaseModel):
    """A skill found inside a target directory that is not yet managed."""

    name: str
    description: str
    source_path: Path
    source_target: str
    conflict: ConflictInfo | None = None

    @property
    def has_conflict(self) -> bool:
        return self.conflict is not None

    def to_info(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "source_path": str(self.source_path),
            "source_target": self.source_target,
            "has_conflict": self.has_conflict,
            "existing_description": self.conflict.existing_description if self.conflict else None,
        }


class ScannedSkill(BaseModel):
    """A skill found in an arbitrary folder, with a preview of metadata repairs."""

    name: str
    description: str
    source_path: Path
    needs_fixes: bool = False
    fixes_preview: list[str] = Field(default_factory=list)
    conflict: ConflictInfo | None = None

    @property
    def has_conflict(self) -> bool:
        return self.conflict is not None

    def to_info(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "source_path": str(self.source_path),
            "needs_fixes": self.needs_fixes,
            "fixes_preview": list(self.fixes_preview),
            "has_conflict": self.has_conflict,
            "existing_description": self.conflict.existing_description if self.conflict else None,
        }


class ImportSelection(BaseModel):
    name: str
    source_path: Path
    resolution: ConflictResolution = ConflictResolution.IMPORT


class FolderImportSelection(ImportSelection):
    apply_fixes: bool = True


class ImportResult(BaseModel):
    imported: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    # (skill name, message)
    errors: list[tuple[str, str]] = Field(default_factory=list)
    synced_to: int = 0
