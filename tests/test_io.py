"""Tests for barconf.io — atomic writers, typed readers and path resolution."""

import json
import os

import pytest

import barconf.io.paths as paths
from barconf.io.atomic import dump_json, write_json_atomic, write_text_atomic
from barconf.io.documents import read_json, read_text
from barconf.errors import FileReadError, JsonParseError


class TestAtomicWrites:
    def test_creates_parents_and_writes(self, tmp_path):
        target = tmp_path / "a" / "b" / "out.txt"
        write_text_atomic(target, "héllo")
        assert target.read_text(encoding="utf-8") == "héllo"

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "out.json"
        write_json_atomic(target, {"v": 1})
        write_json_atomic(target, {"v": 2})
        assert json.loads(target.read_text(encoding="utf-8")) == {"v": 2}
        assert os.listdir(tmp_path) == ["out.json"]

    def test_failure_removes_temp_and_keeps_old_content(self, tmp_path, monkeypatch):
        target = tmp_path / "out.txt"
        write_text_atomic(target, "old")

        def _boom(src, dst):
            raise OSError("no space left on device")

        monkeypatch.setattr("barconf.io.atomic.os.replace", _boom)
        with pytest.raises(OSError):
            write_text_atomic(target, "new")

        assert target.read_text(encoding="utf-8") == "old"
        assert os.listdir(tmp_path) == ["out.txt"]

    def test_dump_json_layout(self):
        assert dump_json({"name": "café"}) == '{\n  "name": "café"\n}\n'


class TestReaders:
    def test_missing_file_passes_through(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_json(tmp_path / "absent.json")

    def test_invalid_json_reports_position(self, tmp_path):
        target = tmp_path / "bad.json"
        target.write_text('{\n  "a": }', encoding="utf-8")
        with pytest.raises(JsonParseError) as exc_info:
            read_json(target)
        assert "line 2" in exc_info.value.detail
        assert exc_info.value.path == str(target)

    def test_undecodable_bytes_are_read_errors(self, tmp_path):
        target = tmp_path / "binary.json"
        target.write_bytes(b"\xff\xfe\x00")
        with pytest.raises(FileReadError):
            read_text(target)

    def test_directory_is_read_error(self, tmp_path):
        with pytest.raises(FileReadError):
            read_text(tmp_path)


class TestPaths:
    def test_overrides_from_environment(self, barconf_dirs):
        assert paths.get_settings_path() == barconf_dirs.settings_file
        assert paths.get_profiles_dir() == barconf_dirs.profiles
        assert paths.get_live_waybar_dir() == barconf_dirs.live

    def test_xdg_fallbacks(self, tmp_path, monkeypatch):
        for name in ("BARCONF_CONFIG_DIR", "BARCONF_DATA_DIR", "BARCONF_WAYBAR_DIR"):
            monkeypatch.delenv(name)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "share"))

        assert paths.get_settings_path() == tmp_path / "cfg" / "barconf" / "settings.json"
        assert paths.get_profiles_dir() == tmp_path / "share" / "barconf" / "waybar" / "profiles"
        assert paths.get_live_waybar_dir() == tmp_path / "cfg" / "waybar"
