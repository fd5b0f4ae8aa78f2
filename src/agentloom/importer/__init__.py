"""Importing skills from targets and arbitrary folders."""

from agentloom.importer.importer import Importer
from agentloom.importer.models import (
    ConflictInfo,
    ConflictResolution,
    DiscoveredSkill,
    FolderImportSelection,
    ImportResult,
    ImportSelection,
    ScannedSkill,
)

__all__ = [
    "ConflictInfo",
    "ConflictResolution",
    "DiscoveredSkill",
    "FolderImportSelection",
    "ImportResult",
    "ImportSelection",
    "Importer",
    "ScannedSkill",
]
