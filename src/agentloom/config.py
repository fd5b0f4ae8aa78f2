"""Application config: ~/.agentloom/config.json with env overrides.

Default paths are computed here once and handed to constructors; nothing else
in the package reads the home directory on its own.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from agentloom.errors import ConfigError

logger = logging.getLogger(__name__)

APP_DIR_NAME = ".agentloom"
CONFIG_FILE_NAME = "config.json"
DEFAULT_SKILLS_DIR_NAME = "skills"
DEFAULT_PORT = 41888


def default_home() -> Path:
    """Home directory used for tool detection (``AGENTLOOM_HOME`` overrides)."""
    env = os.environ.get("AGENTLOOM_HOME")
    if env:
        return Path(env)
    return Path.home()


def get_app_dir(home: Path | None = None) -> Path:
    return (home or default_home()) / APP_DIR_NAME


def default_config_path(home: Path | None = None) -> Path:
    return get_app_dir(home) / CONFIG_FILE_NAME


def default_skills_dir(home: Path | None = None) -> Path:
    return get_app_dir(home) / DEFAULT_SKILLS_DIR_NAME


@dataclass
class TargetConfig:
    enabled: bool = True
    # None means "use the auto-detected path".
    skills_path: Path | None = None
    # Display name, only meaningful for custom folder targets.
    name: str | None = None


@dataclass
class Preferences:
    validate_on_sync: bool = True
    auto_migrate: bool = True
    remove_stale: bool = True
    require_content: bool = True


@dataclass
class AppConfig:
    skills_dir: Path
    home: Path
    targets: dict[str, TargetConfig] = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)
    port: int = DEFAULT_PORT
    path: Path | None = None

    @classmethod
    def default(cls, home: Path | None = None) -> AppConfig:
        home = home or default_home()
        return cls(skills_dir=default_skills_dir(home), home=home)

    def get_or_create_target(self, target_id: str) -> TargetConfig:
        return self.targets.setdefault(target_id, TargetConfig())

    def enable_target(self, target_id: str) -> None:
        self.get_or_create_target(target_id).enabled = True

    def disable_target(self, target_id: str) -> None:
        self.get_or_create_target(target_id).enabled = False

    def enabled_targets(self) -> dict[str, TargetConfig]:
        return {k: v for k, v in self.targets.items() if v.enabled}

    def ensure_skills_dir(self) -> None:
        self.skills_dir.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> dict[str, object]:
        targets: dict[str, object] = {}
        for target_id, cfg in self.targets.items():
            entry: dict[str, object] = {"enabled": cfg.enabled}
            if cfg.skills_path is not None:
                entry["skills_path"] = str(cfg.skills_path)
            if cfg.name is not None:
                entry["name"] = cfg.name
            targets[target_id] = entry
        return {
            "skills_dir": str(self.skills_dir),
            "port": self.port,
            "preferences": {
                "validate_on_sync": self.preferences.validate_on_sync,
                "auto_migrate": self.preferences.auto_migrate,
                "remove_stale": self.preferences.remove_stale,
                "require_content": self.preferences.require_content,
            },
            "targets": targets,
        }

    def save(self, path: Path | None = None) -> Path | None:
        """Write the config atomically. Returns None for in-memory configs."""
        path = path or self.path
        if path is None:
            return None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(path, json.dumps(self.to_dict(), indent=2))
        except OSError as e:
            raise ConfigError(f"Failed to save config to {path}: {e}") from e
        return path


def _atomic_write(path: Path, content: str) -> None:
    """Write content to path atomically using tempfile + os.replace."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        os.write(fd, content.encode())
        os.close(fd)
        os.replace(tmp, path)
    except BaseException:
        os.close(fd)
        os.unlink(tmp)
        raise


def load_config(path: Path | None = None, *, home: Path | None = None) -> AppConfig:
    """Load config from JSON with env var overrides.

    A missing file gives defaults; a malformed one is logged and ignored.
    """
    home = home or default_home()
    path = path or default_config_path(home)
    config = AppConfig.default(home)
    config.path = path

    if path.exists():
        try:
            data = json.loads(path.read_text())
            if isinstance(data, dict):
                _apply(config, data)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")

    if env_skills := os.environ.get("AGENTLOOM_SKILLS_DIR"):
        config.skills_dir = Path(env_skills)
    if port_env := os.environ.get("AGENTLOOM_PORT"):
        try:
            config.port = int(port_env)
        except ValueError:
            logger.warning(f"Ignoring invalid AGENTLOOM_PORT: {port_env}")
    return config


def _apply(config: AppConfig, data: dict[str, object]) -> None:
    if isinstance(data.get("skills_dir"), str):
        config.skills_dir = Path(data["skills_dir"]).expanduser()  # type: ignore[arg-type]
    if isinstance(data.get("port"), int):
        config.port = data["port"]  # type: ignore[assignment]

    prefs = data.get("preferences")
    if isinstance(prefs, dict):
        for key in ("validate_on_sync", "auto_migrate", "remove_stale", "require_content"):
            if isinstance(prefs.get(key), bool):
                setattr(config.preferences, key, prefs[key])

    targets = data.get("targets")
    if isinstance(targets, dict):
        for target_id, entry in targets.items():
            if not isinstance(entry, dict):
                continue
            cfg = TargetConfig()
            if isinstance(entry.get("enabled"), bool):
                cfg.enabled = entry["enabled"]
            if isinstance(entry.get("skills_path"), str):
                cfg.skills_path = Path(entry["skills_path"]).expanduser()
            if isinstance(entry.get("name"), str):
                cfg.name = entry["name"]
            config.targets[str(target_id)] = cfg
