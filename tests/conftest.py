"""Shared fixtures for agentloom tests."""

from pathlib import Path

import pytest

from agentloom.config import AppConfig

_ENV_VARS = ("AGENTLOOM_HOME", "AGENTLOOM_SKILLS_DIR", "AGENTLOOM_PORT")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own AGENTLOOM_* settings out of every test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Fake home directory with Claude Code installed."""
    home = tmp_path / "home"
    (home / ".claude").mkdir(parents=True)
    return home


@pytest.fixture
def app_config(home: Path) -> AppConfig:
    config = AppConfig.default(home)
    config.path = home / ".agentloom" / "config.json"
    return config
