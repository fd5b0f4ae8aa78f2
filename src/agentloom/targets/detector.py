"""Table-driven detection of installed AI tools.

Detection only probes the filesystem; it never creates anything.
"""

from __future__ import annotations

from pathlib import Path

from agentloom.targets.models import Target, TargetKind, ToolSpec

TOOL_TABLE: dict[TargetKind, ToolSpec] = {
    TargetKind.CLAUDE_CODE: ToolSpec(display_name="Claude Code", config_dir=".claude"),
    TargetKind.CODEX: ToolSpec(display_name="Codex", config_dir=".codex"),
    TargetKind.GEMINI: ToolSpec(display_name="Gemini", config_dir=".gemini"),
    TargetKind.CURSOR: ToolSpec(display_name="Cursor", config_dir=".cursor"),
    TargetKind.AMP: ToolSpec(display_name="Amp", config_dir=".amp"),
    TargetKind.GOOSE: ToolSpec(display_name="Goose", config_dir=".goose"),
    TargetKind.ROO_CODE: ToolSpec(display_name="Roo Code", config_dir=".roo-code"),
    # OpenCode reads skills from a singular "skill" directory.
    TargetKind.OPENCODE: ToolSpec(
        display_name="OpenCode", config_dir=".opencode", skills_subdir="skill"
    ),
    TargetKind.VIBE: ToolSpec(display_name="Vibe", config_dir=".vibe"),
    TargetKind.FIREBENDER: ToolSpec(display_name="Firebender", config_dir=".firebender"),
    TargetKind.MUX: ToolSpec(display_name="Mux", config_dir=".mux"),
    TargetKind.AUTOHAND: ToolSpec(display_name="Autohand", config_dir=".autohand"),
}


def kind_from_id(target_id: str) -> TargetKind | None:
    try:
        return TargetKind(target_id)
    except ValueError:
        return None


def default_skills_path(kind: TargetKind, home: Path) -> Path:
    spec = TOOL_TABLE[kind]
    return home / spec.config_dir / spec.skills_subdir


def make_target(kind: TargetKind, skills_path: Path, *, auto_detected: bool = False) -> Target:
    return Target(
        id=str(kind),
        name=TOOL_TABLE[kind].display_name,
        skills_path=skills_path,
        auto_detected=auto_detected,
        kind=kind,
    )


def detect_target(kind: TargetKind, home: Path) -> Target | None:
    """Return an auto-detected target if the tool's config dir exists."""
    if not (home / TOOL_TABLE[kind].config_dir).is_dir():
        return None
    return make_target(kind, default_skills_path(kind, home), auto_detected=True)


def detect_all(home: Path) -> list[Target]:
    targets: list[Target] = []
    for kind in TargetKind:
        target = detect_target(kind, home)
        if target is not None:
            targets.append(target)
    return targets
