"""Symlink/junction synchronization of skills into targets."""

from agentloom.sync.engine import SyncEngine, is_within
from agentloom.sync.links import LinkOps, PosixLinks, WindowsLinks, default_link_ops
from agentloom.sync.models import LinkAction, SyncError, SyncResult

__all__ = [
    "LinkAction",
    "LinkOps",
    "PosixLinks",
    "SyncEngine",
    "SyncError",
    "SyncResult",
    "WindowsLinks",
    "default_link_ops",
    "is_within",
]
