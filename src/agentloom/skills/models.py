"""Pydantic models for skills, parse outcomes and frontmatter normalization."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

SKILL_FILE_NAME = "SKILL.md"

# Diagnostics containing this marker can be repaired by fix_frontmatter().
FIXABLE_MARKER = "can be auto-fixed"


class ValidationStatus(StrEnum):
    UNKNOWN = "unknown"
    VALID = "valid"
    INVALID = "invalid"


class SkillMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Required (agentskills.io)
    name: str = ""
    description: str = ""
    # Optional
    license: str | None = None
    compatibility: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    allowed_tools: str | None = Field(default=None, alias="allowed-tools")
    # Legacy, kept for older skill files
    tags: list[str] = Field(default_factory=list)
    version: str | None = None
    author: str | None = None


class Skill(BaseModel):
    meta: SkillMeta
    content: str = ""
    path: Path
    validation_status: ValidationStatus = ValidationStatus.UNKNOWN
    validation_errors: list[str] = Field(default_factory=list)
    # Non-fatal findings from parsing; merged into validation_errors on validate.
    diagnostics: list[str] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.meta.name

    @property
    def description(self) -> str:
        return self.meta.description

    @property
    def folder_name(self) -> str:
        """Directory name on disk; may differ from name after an external edit."""
        return self.path.name or self.meta.name

    @property
    def is_valid(self) -> bool:
        return self.validation_status == ValidationStatus.VALID

    @property
    def skill_file(self) -> Path:
        return self.path / SKILL_FILE_NAME

    def has_fixable_errors(self) -> bool:
        return any(FIXABLE_MARKER in e for e in self.validation_errors + self.diagnostics)

    def to_info(self) -> dict[str, object]:
        """Flat JSON-ready view used by the HTTP layer."""
        return {
            "name": self.meta.name,
            "folder_name": self.folder_name,
            "description": self.meta.description,
            "license": self.meta.license,
            "compatibility": self.meta.compatibility,
            "metadata": dict(self.meta.metadata),
            "allowed_tools": self.meta.allowed_tools,
            "tags": list(self.meta.tags),
            "version": self.meta.version,
            "author": self.meta.author,
            "path": str(self.path),
            "validation_status": str(self.validation_status),
            "validation_errors": list(self.validation_errors),
        }


class ParseStatus(StrEnum):
    OK = "ok"
    DIAGNOSTICS = "diagnostics"
    FAILED = "failed"


class ParseOutcome(BaseModel):
    """Tagged result of parsing a SKILL.md text.

    OK and DIAGNOSTICS carry usable metadata; FAILED carries only ``error``
    (and an empty SkillMeta) so callers decide whether to raise or fall back.
    """

    status: ParseStatus
    meta: SkillMeta = Field(default_factory=SkillMeta)
    content: str = ""
    diagnostics: list[str] = Field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == ParseStatus.FAILED


class NormalizeResult(BaseModel):
    yaml: str
    fixes: list[str] = Field(default_factory=list)
    was_modified: bool = False
