"""Pydantic models for sync reports."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from agentloom.targets.models import Target


class LinkAction(StrEnum):
    CREATED = "created"
    MIGRATED = "migrated"
    UNCHANGED = "unchanged"


class SyncError(BaseModel):
    # None for target-level errors.
    skill: str | None = None
    message: str


class SyncResult(BaseModel):
    target_id: str
    target_name: str
    created: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)
    errors: list[SyncError] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @classmethod
    def for_target(cls, target: Target) -> SyncResult:
        return cls(target_id=target.id, target_name=target.name)

    @property
    def is_success(self) -> bool:
        return not self.errors

    @property
    def synced_count(self) -> int:
        return len(self.created) + len(self.unchanged)

    def add_error(self, skill: str | None, message: str) -> None:
        self.errors.append(SyncError(skill=skill, message=message))
