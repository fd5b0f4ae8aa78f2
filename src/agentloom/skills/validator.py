"""Skill validation against the agentskills.io naming and length rules."""

from __future__ import annotations

from agentloom.errors import ValidationFailedError
from agentloom.skills.models import Skill, ValidationStatus
from agentloom.skills.parser import is_valid_skill_name

MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024
MAX_COMPATIBILITY_LENGTH = 500


class Validator:
    def __init__(self, *, require_content: bool = True) -> None:
        self.require_content = require_content

    def collect_errors(self, skill: Skill) -> list[str]:
        """Every rule violation for ``skill``, in rule order. Never stops early."""
        errors: list[str] = []
        meta = skill.meta

        if not meta.name:
            errors.append("name is required")
        else:
            if len(meta.name) > MAX_NAME_LENGTH:
                errors.append(
                    f"name exceeds {MAX_NAME_LENGTH} characters (has {len(meta.name)})"
                )
            if not is_valid_skill_name(meta.name):
                errors.append(
                    f"name '{meta.name}' must be kebab-case (lowercase letters, numbers, "
                    "hyphens; starts with a letter; no leading/trailing/consecutive hyphens)"
                )
            if meta.name != skill.folder_name:
                errors.append(
                    f"name '{meta.name}' does not match folder name '{skill.folder_name}'"
                )

        if not meta.description.strip():
            errors.append("description is required")
        elif len(meta.description) > MAX_DESCRIPTION_LENGTH:
            errors.append(
                f"description exceeds {MAX_DESCRIPTION_LENGTH} characters "
                f"(has {len(meta.description)})"
            )

        if meta.compatibility is not None and len(meta.compatibility) > MAX_COMPATIBILITY_LENGTH:
            errors.append(
                f"compatibility exceeds {MAX_COMPATIBILITY_LENGTH} characters "
                f"(has {len(meta.compatibility)})"
            )

        if self.require_content and not skill.content.strip():
            errors.append("skill must have content")

        for diagnostic in skill.diagnostics:
            if diagnostic not in errors:
                errors.append(diagnostic)
        return errors

    def validate(self, skill: Skill) -> bool:
        """Update ``skill``'s status and errors. Returns True when valid."""
        errors = self.collect_errors(skill)
        skill.validation_errors = errors
        skill.validation_status = ValidationStatus.INVALID if errors else ValidationStatus.VALID
        return not errors

    def check(self, skill: Skill) -> None:
        """Like validate(), but raises ValidationFailedError on failure."""
        if not self.validate(skill):
            raise ValidationFailedError(skill.name or skill.folder_name, skill.validation_errors)

    def validate_all(self, skills: list[Skill]) -> list[bool]:
        return [self.validate(s) for s in skills]
