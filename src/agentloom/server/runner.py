"""Uvicorn launcher with a port.lock file in the app directory."""

from __future__ import annotations

import json
import os
import signal
from pathlib import Path

from agentloom.config import AppConfig, get_app_dir, load_config


def get_port_lock_path(home: Path | None = None) -> Path:
    return get_app_dir(home) / "port.lock"


def write_port_lock(port: int, home: Path | None = None) -> Path:
    lock_path = get_port_lock_path(home)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock_path.write_text(json.dumps({"port": port, "pid": os.getpid()}))
    return lock_path


def read_port_lock(home: Path | None = None) -> dict:
    lock_path = get_port_lock_path(home)
    try:
        return json.loads(lock_path.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def remove_port_lock(home: Path | None = None) -> None:
    get_port_lock_path(home).unlink(missing_ok=True)


def run_server(config: AppConfig | None = None) -> None:
    """Start the HTTP API server with uvicorn on 127.0.0.1."""
    import uvicorn

    from agentloom.manager import SkillManager
    from agentloom.server.app import create_app

    if config is None:
        config = load_config()

    config.ensure_skills_dir()
    app = create_app(SkillManager.load(config))
    write_port_lock(config.port, config.home)

    def cleanup(signum, frame):
        remove_port_lock(config.home)
        raise SystemExit(0)

    signal.signal(signal.SIGTERM, cleanup)
    signal.signal(signal.SIGINT, cleanup)

    try:
        uvicorn.run(app, host="127.0.0.1", port=config.port)
    finally:
        remove_port_lock(config.home)
