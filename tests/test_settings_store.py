"""Tests for settings_store — schema, clamp/reject policy and atomic persistence."""

import json
import logging

import pytest

import barconf.app.settings_store
from barconf.app.settings_store import (
    SETTINGS_FIELDS,
    AppSettings,
    default_settings,
    load_settings,
    reset_to_defaults,
    save_settings,
    validate_and_sanitize_settings,
)
from barconf.errors import CorruptedError, ErrorKind, FileWriteError, JsonParseError, ValidationError


def _doc(**overrides):
    doc = default_settings().to_dict()
    doc.update(overrides)
    return doc


class TestDefaults:
    def test_defaults_match_field_table(self):
        defaults = default_settings()
        for field_def in SETTINGS_FIELDS:
            assert getattr(defaults, field_def.key) == field_def.default

    def test_every_dataclass_field_has_a_definition(self):
        assert set(default_settings().to_dict()) == {f.key for f in SETTINGS_FIELDS}

    def test_defaults_pass_their_own_validation(self):
        assert validate_and_sanitize_settings(default_settings()) == default_settings()


class TestValidateAndSanitize:
    def test_accepts_valid_document(self):
        doc = _doc(theme="dark", font_size=16, ui_scale=1.25, start_minimized=True)
        settings = validate_and_sanitize_settings(doc)
        assert settings.theme == "dark"
        assert settings.font_size == 16
        assert settings.ui_scale == 1.25
        assert settings.start_minimized is True

    @pytest.mark.parametrize(
        "key, value, expected",
        [
            ("font_size", 99, 24),
            ("font_size", 2, 10),
            ("ui_scale", 5.0, 2.0),
            ("ui_scale", 0.1, 0.75),
            ("autosave_delay_ms", -5, 100),
            ("backup_count", 1000, 50),
        ],
    )
    def test_ranges_clamp(self, key, value, expected):
        settings = validate_and_sanitize_settings(_doc(**{key: value}))
        assert getattr(settings, key) == expected

    def test_clamp_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="barconf.app.settings_store"):
            validate_and_sanitize_settings(_doc(font_size=99))
        assert "clamped setting font_size from 99 to 24" in caplog.text

    def test_integral_float_is_accepted_for_int_field(self):
        assert validate_and_sanitize_settings(_doc(font_size=14.0)).font_size == 14

    def test_int_is_accepted_for_float_field(self):
        settings = validate_and_sanitize_settings(_doc(ui_scale=1))
        assert settings.ui_scale == 1.0
        assert isinstance(settings.ui_scale, float)

    @pytest.mark.parametrize(
        "key, value",
        [
            ("theme", "solarized"),
            ("language", "xx"),
            ("log_level", "info"),
            ("animations_enabled", "yes"),
            ("show_tray_icon", 1),
            ("font_size", "14"),
            ("font_size", True),
            ("font_size", 13.5),
            ("ui_scale", float("nan")),
        ],
    )
    def test_rejects_naming_the_field(self, key, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_and_sanitize_settings(_doc(**{key: value}))
        assert exc_info.value.field == key
        assert exc_info.value.kind is ErrorKind.VALIDATION

    def test_rejects_unknown_key(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_and_sanitize_settings(_doc(wallpaper="x.png"))
        assert exc_info.value.field == "wallpaper"

    def test_rejects_partial_document(self):
        doc = _doc()
        del doc["theme"]
        with pytest.raises(ValidationError) as exc_info:
            validate_and_sanitize_settings(doc)
        assert exc_info.value.field == "theme"

    def test_rejects_non_object(self):
        with pytest.raises(ValidationError):
            validate_and_sanitize_settings(["theme", "dark"])


class TestLoadSettings:
    def test_missing_file_returns_defaults_without_writing(self, barconf_dirs):
        assert load_settings() == default_settings()
        assert not barconf_dirs.settings_file.exists()

    def test_truncated_json_is_json_parse_error_and_file_untouched(self, barconf_dirs):
        barconf_dirs.settings_file.parent.mkdir(parents=True)
        barconf_dirs.settings_file.write_text('{"theme": "da', encoding="utf-8")

        with pytest.raises(JsonParseError) as exc_info:
            load_settings()

        assert exc_info.value.path == str(barconf_dirs.settings_file)
        assert barconf_dirs.settings_file.read_text(encoding="utf-8") == '{"theme": "da'

    def test_non_object_document_is_corrupted(self, barconf_dirs):
        barconf_dirs.settings_file.parent.mkdir(parents=True)
        barconf_dirs.settings_file.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(CorruptedError):
            load_settings()

    def test_invalid_stored_value_is_corrupted_naming_field(self, barconf_dirs):
        barconf_dirs.settings_file.parent.mkdir(parents=True)
        barconf_dirs.settings_file.write_text(json.dumps(_doc(theme="neon")), encoding="utf-8")
        with pytest.raises(CorruptedError) as exc_info:
            load_settings()
        assert exc_info.value.field == "theme"

    def test_unknown_keys_dropped_and_missing_keys_defaulted(self, barconf_dirs):
        barconf_dirs.settings_file.parent.mkdir(parents=True)
        barconf_dirs.settings_file.write_text(
            json.dumps({"theme": "light", "legacy_option": 3}), encoding="utf-8"
        )
        settings = load_settings()
        assert settings.theme == "light"
        assert settings.font_size == default_settings().font_size

    def test_out_of_range_stored_value_is_clamped(self, barconf_dirs):
        barconf_dirs.settings_file.parent.mkdir(parents=True)
        barconf_dirs.settings_file.write_text(json.dumps(_doc(font_size=400)), encoding="utf-8")
        assert load_settings().font_size == 24


class TestSaveAndReset:
    def test_round_trip(self, barconf_dirs):
        validated = validate_and_sanitize_settings(
            _doc(theme="dark", language="de", font_size=40, backup_count=7)
        )
        save_settings(validated)
        assert load_settings() == validated

    def test_save_writes_plain_json_object(self, barconf_dirs):
        save_settings(default_settings())
        data = json.loads(barconf_dirs.settings_file.read_text(encoding="utf-8"))
        assert data == default_settings().to_dict()

    def test_save_leaves_no_temp_files(self, barconf_dirs):
        save_settings(default_settings())
        save_settings(default_settings())
        assert sorted(p.name for p in barconf_dirs.config.iterdir()) == ["settings.json"]

    def test_failed_write_keeps_previous_file(self, barconf_dirs, monkeypatch):
        first = validate_and_sanitize_settings(_doc(theme="dark"))
        save_settings(first)

        def _boom(src, dst):
            raise OSError("disk full")

        with monkeypatch.context() as m:
            m.setattr("barconf.io.atomic.os.replace", _boom)
            with pytest.raises(FileWriteError):
                save_settings(validate_and_sanitize_settings(_doc(theme="light")))

        assert load_settings() == first
        assert sorted(p.name for p in barconf_dirs.config.iterdir()) == ["settings.json"]

    def test_reset_is_idempotent_and_equals_defaults(self, barconf_dirs):
        save_settings(validate_and_sanitize_settings(_doc(theme="dark")))
        first = reset_to_defaults()
        second = reset_to_defaults()
        assert first == second == default_settings()
        assert load_settings() == default_settings()

    def test_reset_overwrites_corrupted_file(self, barconf_dirs):
        barconf_dirs.settings_file.parent.mkdir(parents=True)
        barconf_dirs.settings_file.write_text("{oops", encoding="utf-8")
        reset_to_defaults()
        assert load_settings() == default_settings()

    def test_explicit_path_overrides_configured_location(self, tmp_path):
        target = tmp_path / "elsewhere" / "settings.json"
        barconf.app.settings_store.save_settings(default_settings(), target)
        assert target.exists()
        assert barconf.app.settings_store.load_settings(target) == default_settings()


def test_app_settings_is_immutable():
    settings = default_settings()
    with pytest.raises(AttributeError):
        settings.theme = "dark"
    assert isinstance(settings, AppSettings)
