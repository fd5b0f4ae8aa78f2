"""Platform link operations behind one small capability surface.

The sync engine only talks to ``LinkOps``; it never branches on the platform.

- POSIX: plain symbolic links.
- Windows: directory junctions, which unprivileged users can create (true
  symlinks need SeCreateSymbolicLinkPrivilege or Developer Mode). Junctions
  only exist for directories, so a file source is copied instead. A copy is
  not a link: later passes cannot recognise it as pointing at its source and
  will treat it as a pre-existing object (migrated or "not a symlink"), so
  file sources are never reported as unchanged on Windows.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Protocol

_WIN_LONG_PATH_PREFIX = "\\\\?\\"


class LinkOps(Protocol):
    def is_link(self, path: Path) -> bool: ...

    def read_link_target(self, path: Path) -> Path: ...

    def remove_link(self, path: Path) -> None: ...

    def create_link(self, source: Path, at_path: Path) -> None: ...


class PosixLinks:
    def is_link(self, path: Path) -> bool:
        return path.is_symlink()

    def read_link_target(self, path: Path) -> Path:
        return Path(os.readlink(path))

    def remove_link(self, path: Path) -> None:
        path.unlink()

    def create_link(self, source: Path, at_path: Path) -> None:
        os.symlink(source, at_path, target_is_directory=source.is_dir())


class WindowsLinks:
    def is_link(self, path: Path) -> bool:
        return path.is_symlink() or path.is_junction()

    def read_link_target(self, path: Path) -> Path:
        target = os.readlink(path)
        if target.startswith(_WIN_LONG_PATH_PREFIX):
            target = target[len(_WIN_LONG_PATH_PREFIX) :]
        return Path(target)

    def remove_link(self, path: Path) -> None:
        # Junctions and directory symlinks go through rmdir, file symlinks through unlink.
        try:
            os.rmdir(path)
        except OSError:
            os.unlink(path)

    def create_link(self, source: Path, at_path: Path) -> None:
        if source.is_dir():
            import _winapi

            _winapi.CreateJunction(str(source.absolute()), str(at_path))
        else:
            shutil.copy2(source, at_path)


def default_link_ops() -> LinkOps:
    if os.name == "nt":
        return WindowsLinks()
    return PosixLinks()
