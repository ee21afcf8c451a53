"""Filesystem locations for settings, profiles and the live Waybar files.

Resolved at call time from the environment so tests can redirect everything
with monkeypatch.setenv.

This module is a STABLE BOUNDARY.
"""

import os
from pathlib import Path


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")))


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share")))


def get_config_dir() -> Path:
    """Return barconf's config directory (BARCONF_CONFIG_DIR or XDG_CONFIG_HOME/barconf)."""
    override = os.environ.get("BARCONF_CONFIG_DIR")
    return Path(override) if override else _xdg_config_home() / "barconf"


def get_settings_path() -> Path:
    return get_config_dir() / "settings.json"


def get_data_dir() -> Path:
    """Return barconf's data directory (BARCONF_DATA_DIR or XDG_DATA_HOME/barconf)."""
    override = os.environ.get("BARCONF_DATA_DIR")
    return Path(override) if override else _xdg_data_home() / "barconf"


def get_profiles_dir() -> Path:
    return get_data_dir() / "waybar" / "profiles"


def get_live_waybar_dir() -> Path:
    """Return the directory the Waybar process reads its config from."""
    override = os.environ.get("BARCONF_WAYBAR_DIR")
    return Path(override) if override else _xdg_config_home() / "waybar"
