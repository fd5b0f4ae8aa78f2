"""Skills: parsing, normalization, storage and validation."""

from agentloom.skills.models import (
    SKILL_FILE_NAME,
    NormalizeResult,
    ParseOutcome,
    ParseStatus,
    Skill,
    SkillMeta,
    ValidationStatus,
)
from agentloom.skills.parser import (
    is_valid_skill_name,
    normalize_frontmatter,
    parse_skill_text,
    to_kebab_case,
)
from agentloom.skills.store import (
    SkillStore,
    create_skill,
    discover_skills,
    load_skill,
    load_skill_lenient,
)
from agentloom.skills.validator import Validator

__all__ = [
    "SKILL_FILE_NAME",
    "NormalizeResult",
    "ParseOutcome",
    "ParseStatus",
    "Skill",
    "SkillMeta",
    "SkillStore",
    "ValidationStatus",
    "Validator",
    "create_skill",
    "discover_skills",
    "is_valid_skill_name",
    "load_skill",
    "load_skill_lenient",
    "normalize_frontmatter",
    "parse_skill_text",
    "to_kebab_case",
]
