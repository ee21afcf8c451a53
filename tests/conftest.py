"""Pytest configuration and shared fixtures for barconf tests.

Every test runs against a throwaway config/data/live directory so nothing
ever touches the real ~/.config.
"""

from dataclasses import dataclass
from pathlib import Path

import pytest

import barconf.io.logging_setup
from barconf.app.live_sync import LiveSync
from barconf.app.profile_repository import ProfileRepository
from barconf.app.waybar_service import WaybarConfigService


@dataclass
class Dirs:
    config: Path
    data: Path
    live: Path
    logs: Path

    @property
    def settings_file(self) -> Path:
        return self.config / "settings.json"

    @property
    def profiles(self) -> Path:
        return self.data / "waybar" / "profiles"


@pytest.fixture(autouse=True)
def barconf_dirs(tmp_path, monkeypatch):
    """Redirect every barconf location into tmp_path."""
    dirs = Dirs(
        config=tmp_path / "config",
        data=tmp_path / "data",
        live=tmp_path / "waybar",
        logs=tmp_path / "logs",
    )
    monkeypatch.setenv("BARCONF_CONFIG_DIR", str(dirs.config))
    monkeypatch.setenv("BARCONF_DATA_DIR", str(dirs.data))
    monkeypatch.setenv("BARCONF_WAYBAR_DIR", str(dirs.live))
    monkeypatch.setenv("BARCONF_LOG_DIR", str(dirs.logs))
    monkeypatch.setenv("BARCONF_LOG_FILE", str(dirs.logs / "barconf.log"))
    monkeypatch.delenv("BARCONF_LOG_LEVEL", raising=False)
    monkeypatch.delenv("BARCONF_LOG_STDERR_LEVEL", raising=False)
    yield dirs
    barconf.io.logging_setup.reset()


@pytest.fixture
def live_sync(barconf_dirs):
    return LiveSync(barconf_dirs.live)


@pytest.fixture
def repository(barconf_dirs, live_sync):
    return ProfileRepository(barconf_dirs.profiles, live_sync=live_sync)


@pytest.fixture
def service(repository):
    return WaybarConfigService(repository)
