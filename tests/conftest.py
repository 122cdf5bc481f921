"""Shared fixtures for agent-credtoolkit tests."""
from pathlib import Path

import pytest

from agent_credtoolkit.credentials.domains import preferences

ENV_VARS = (
    "CREDTOOLKIT_IDENTIFIER",
    "CREDTOOLKIT_SECRET",
    "CREDTOOLKIT_PROFILE",
    "GCP_PROJECT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove credential-related environment variables for every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory for testing."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    fake_config_dir = fake_home / ".config" / "agent-credtoolkit"
    fake_preferences_file = fake_config_dir / "preferences.json"
    monkeypatch.setattr(preferences, "PREFERENCES_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_preferences_file)

    return fake_home


@pytest.fixture
def temp_config_dir(temp_home):
    """Fixture to create temporary config directory."""
    config_dir = temp_home / ".config" / "agent-credtoolkit"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir
