"""SKILL.md parsing: frontmatter split, YAML decoding, coercion and normalization.

A skill file looks like::

    ---
    name: my-skill
    description: What this skill does
    ---

    Skill content here...

``parse_skill_text`` is the single parse entry point. It returns a tagged
ParseOutcome so strict loading can raise and lenient loading can fall back
without duplicating any of the parsing rules.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

from agentloom.skills.models import (
    FIXABLE_MARKER,
    NormalizeResult,
    ParseOutcome,
    ParseStatus,
    SkillMeta,
)

DELIMITER = "---"
MISSING_OPEN_DELIMITER = "File must start with YAML frontmatter (---)"
MISSING_CLOSE_DELIMITER = "Could not find closing frontmatter delimiter (---)"
PLACEHOLDER_DESCRIPTION = "No description provided"
INVALID_FRONTMATTER_DESCRIPTION = "Skill imported with invalid frontmatter"

_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")
_TOP_LEVEL_FIELD_RE = re.compile(r"^(name|description)\s*:\s*(.*)$")
_OPTIONAL_STRING_FIELDS = ("license", "compatibility", "allowed-tools", "version", "author")
# Keep long descriptions on one line when re-serializing.
_YAML_WIDTH = 4096


class FrontmatterSplitError(ValueError):
    """Raised by split_frontmatter when the delimiters are missing."""

    def __init__(self, message: str, *, unclosed: bool) -> None:
        super().__init__(message)
        self.unclosed = unclosed


def is_valid_skill_name(name: str) -> bool:
    """Kebab-case check: starts with a letter, ends alphanumeric, no ``--``."""
    return bool(_NAME_RE.match(name))


def to_kebab_case(text: str) -> str:
    """Convert any string into a valid skill name.

    "My_Cool Skill 1" -> "my-cool-skill-1", "camelCase" -> "camel-case",
    "123abc" -> "skill-123abc", "" -> "unnamed-skill".
    """
    out: list[str] = []
    prev = ""
    for ch in text:
        if ch.isascii() and ch.isalnum():
            if ch.isupper() and prev.islower():
                out.append("-")
            out.append(ch.lower())
            prev = ch
        else:
            if out and out[-1] != "-":
                out.append("-")
            prev = ""
    result = "".join(out).strip("-")
    if result[:1].isdigit():
        result = f"skill-{result}"
    return result or "unnamed-skill"


def has_frontmatter(text: str) -> bool:
    first_line = text.lstrip().split("\n", 1)[0]
    return first_line.strip() == DELIMITER


def split_frontmatter(text: str) -> tuple[str, str]:
    """Split into (yaml_block, body). Raises FrontmatterSplitError."""
    lines = text.lstrip().split("\n")
    if lines[0].strip() != DELIMITER:
        raise FrontmatterSplitError(MISSING_OPEN_DELIMITER, unclosed=False)
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == DELIMITER:
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1 :]).strip()
    raise FrontmatterSplitError(MISSING_CLOSE_DELIMITER, unclosed=True)


def coerce_to_string(value: Any) -> str:
    """Flatten a YAML value into the string form stored in metadata."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(coerce_to_string(v) for v in value)
    if isinstance(value, dict):
        return "; ".join(f"{k}={coerce_to_string(v)}" for k, v in value.items())
    return str(value)


def _type_label(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "list"
    if isinstance(value, dict):
        return "mapping"
    return type(value).__name__


def parse_skill_text(text: str) -> ParseOutcome:
    """Parse a whole SKILL.md text into a tagged outcome."""
    try:
        block, body = split_frontmatter(text)
    except FrontmatterSplitError as e:
        return ParseOutcome(status=ParseStatus.FAILED, error=str(e))

    try:
        data = yaml.safe_load(block) if block.strip() else {}
    except yaml.YAMLError as e:
        return ParseOutcome(status=ParseStatus.FAILED, error=f"Invalid YAML: {e}")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return ParseOutcome(
            status=ParseStatus.FAILED,
            error="Frontmatter must be a mapping of keys to values",
        )

    diagnostics: list[str] = []
    fields: dict[str, Any] = {}

    for key in ("name", "description"):
        value = data.get(key)
        if value is None:
            fields[key] = ""
        elif isinstance(value, str):
            fields[key] = value
        elif isinstance(value, (int, float, bool)):
            fields[key] = coerce_to_string(value)
            diagnostics.append(
                f"Field '{key}' is a {_type_label(value)}, read as string ({FIXABLE_MARKER})"
            )
        else:
            return ParseOutcome(
                status=ParseStatus.FAILED,
                error=f"Field '{key}' must be a string, got {_type_label(value)}",
            )

    for key in _OPTIONAL_STRING_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, (dict, list, tuple)):
            return ParseOutcome(
                status=ParseStatus.FAILED,
                error=f"Field '{key}' must be a string, got {_type_label(value)}",
            )
        fields[key] = coerce_to_string(value)

    raw_metadata = data.get("metadata")
    if raw_metadata is not None and not isinstance(raw_metadata, dict):
        return ParseOutcome(
            status=ParseStatus.FAILED,
            error=f"Field 'metadata' must be a mapping, got {_type_label(raw_metadata)}",
        )
    metadata: dict[str, str] = {}
    for key, value in (raw_metadata or {}).items():
        if not isinstance(value, str):
            diagnostics.append(
                f"metadata.{key} is a {_type_label(value)}, stored as string ({FIXABLE_MARKER})"
            )
        metadata[str(key)] = coerce_to_string(value)
    fields["metadata"] = metadata

    raw_tags = data.get("tags")
    if isinstance(raw_tags, str):
        fields["tags"] = [t.strip() for t in raw_tags.split(",") if t.strip()]
    elif isinstance(raw_tags, (list, tuple)):
        fields["tags"] = [coerce_to_string(t) for t in raw_tags]

    return ParseOutcome(
        status=ParseStatus.DIAGNOSTICS if diagnostics else ParseStatus.OK,
        meta=SkillMeta.model_validate(fields),
        content=body,
        diagnostics=diagnostics,
    )


def extract_fields(text: str) -> dict[str, str]:
    """Best-effort scan for top-level ``name:``/``description:`` lines.

    Used when the metadata block cannot be decoded at all.
    """
    found: dict[str, str] = {}
    for line in text.split("\n"):
        match = _TOP_LEVEL_FIELD_RE.match(line.rstrip())
        if match and match.group(1) not in found:
            found[match.group(1)] = match.group(2).strip().strip('"').strip("'")
    return found


def extract_name_from_content(content: str) -> str | None:
    """Return the kebab-cased frontmatter name, or None if there is none."""
    try:
        block, _ = split_frontmatter(content)
    except FrontmatterSplitError:
        return None
    name = extract_fields(block).get("name")
    return to_kebab_case(name) if name else None


def update_name_in_content(content: str, new_name: str) -> str:
    """Rewrite the frontmatter ``name:`` line, inserting one if absent."""
    if not has_frontmatter(content):
        return content
    lines = content.lstrip().split("\n")
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == DELIMITER:
            break
        if line.startswith("name:"):
            lines[i] = f"name: {new_name}"
            return "\n".join(lines)
    else:
        return content
    lines.insert(1, f"name: {new_name}")
    return "\n".join(lines)


def dump_frontmatter(data: dict[str, Any]) -> str:
    return yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=_YAML_WIDTH,
    ).rstrip()


def render_skill_file(frontmatter_yaml: str, body: str) -> str:
    return f"{DELIMITER}\n{frontmatter_yaml}\n{DELIMITER}\n\n{body}\n"


def render_template(name: str, description: str) -> str:
    """Initial SKILL.md written by create_skill()."""
    block = dump_frontmatter({"name": name, "description": description})
    return render_skill_file(block, f"# {name}\n\n{description}")


def _minimal(folder_name: str, fix: str) -> NormalizeResult:
    block = dump_frontmatter(
        {"name": folder_name, "description": INVALID_FRONTMATTER_DESCRIPTION}
    )
    return NormalizeResult(yaml=block, fixes=[fix], was_modified=True)


def normalize_frontmatter(yaml_text: str, folder_name: str) -> NormalizeResult:
    """Repair common frontmatter problems.

    - unparseable YAML or a non-mapping root becomes minimal frontmatter
    - a missing name falls back to the folder name, an invalid one is kebab-cased
    - a missing description gets a placeholder
    - non-string metadata values are flattened to strings
    """
    try:
        data = yaml.safe_load(yaml_text) if yaml_text.strip() else {}
    except yaml.YAMLError:
        return _minimal(folder_name, "Replaced unparseable YAML with minimal frontmatter")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return _minimal(
            folder_name, "YAML root was not a mapping, replaced with minimal frontmatter"
        )

    fixes: list[str] = []

    name = data.get("name")
    if isinstance(name, str) and name.strip():
        if not is_valid_skill_name(name):
            fixed = to_kebab_case(name)
            fixes.append(f"Converted name '{name}' to kebab-case '{fixed}'")
            data["name"] = fixed
    else:
        fixes.append(f"Added missing name field: '{folder_name}'")
        data["name"] = folder_name

    description = data.get("description")
    if isinstance(description, (int, float)) and not isinstance(description, bool):
        fixes.append("Converted description to string")
        data["description"] = coerce_to_string(description)
    elif not (isinstance(description, str) and description.strip()):
        fixes.append("Added missing description field")
        data["description"] = PLACEHOLDER_DESCRIPTION

    metadata = data.get("metadata")
    if isinstance(metadata, dict):
        for key, value in list(metadata.items()):
            if not isinstance(value, str):
                fixes.append(f"Converted metadata.{key} from {_type_label(value)} to string")
                metadata[key] = coerce_to_string(value)

    return NormalizeResult(
        yaml=dump_frontmatter(data),
        fixes=fixes,
        was_modified=bool(fixes),
    )
