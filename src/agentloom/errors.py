"""Exception types raised by single-entity operations.

Batch operations (discover, validate all, sync, import) never raise these;
they collect per-item failures into their report models instead.
"""

from __future__ import annotations

from pathlib import Path


class AgentLoomError(Exception):
    """Base class for all agentloom errors."""


# Structural


class MissingSkillFileError(AgentLoomError):
    """Raised when a skill directory has no SKILL.md."""

    def __init__(self, skill_dir: Path) -> None:
        self.path = skill_dir
        super().__init__(f"Missing SKILL.md in skill directory: {skill_dir}")


class FrontmatterError(AgentLoomError):
    """Raised when a SKILL.md metadata block is unreadable or malformed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Invalid frontmatter in {path}: {message}")


# Validation


class ValidationFailedError(AgentLoomError):
    """Raised when a single skill fails validation."""

    def __init__(self, name: str, errors: list[str]) -> None:
        self.name = name
        self.errors = list(errors)
        super().__init__(f"Skill validation failed for '{name}': {'; '.join(errors)}")


class InvalidSkillNameError(AgentLoomError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Invalid skill name '{name}': must be kebab-case "
            "(lowercase letters, numbers, hyphens)"
        )


# Lookup / existence


class SkillNotFoundError(AgentLoomError):
    def __init__(self, path: Path | str) -> None:
        self.path = path
        super().__init__(f"Skill not found: {path}")


class SkillExistsError(AgentLoomError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Skill already exists: {name}")


class TargetError(AgentLoomError):
    """Raised for target operations that cannot be performed."""


class TargetNotFoundError(TargetError):
    def __init__(self, target_id: str) -> None:
        self.target_id = target_id
        super().__init__(f"Target not found: {target_id}")


class TargetExistsError(TargetError):
    def __init__(self, target_id: str) -> None:
        self.target_id = target_id
        super().__init__(f"Target already exists: {target_id}")


class UnknownTargetTypeError(TargetError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown target type: {kind}")


# Links


class LinkError(AgentLoomError):
    """Raised when a link cannot be created or removed."""


class NotALinkError(LinkError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Path exists and is not a symlink: {path}")


# Configuration


class ConfigError(AgentLoomError):
    """Raised when the config file cannot be written."""
