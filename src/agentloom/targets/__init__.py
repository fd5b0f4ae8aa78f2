"""Sync targets: tool detection, models and the target registry."""

from agentloom.targets.detector import TOOL_TABLE, detect_all, detect_target
from agentloom.targets.models import SyncStatus, Target, TargetInfo, TargetKind, ToolSpec
from agentloom.targets.registry import TargetRegistry

__all__ = [
    "TOOL_TABLE",
    "SyncStatus",
    "Target",
    "TargetInfo",
    "TargetKind",
    "TargetRegistry",
    "ToolSpec",
    "detect_all",
    "detect_target",
]
