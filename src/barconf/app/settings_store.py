"""Global application settings: schema, sanitization and persistence.

The settings document is a flat JSON object at BARCONF_CONFIG_DIR/settings.json.
Callers always send a full document; there is no partial patch at this layer.

// [LAW:one-source-of-truth] All known settings, defaults and constraints live in SETTINGS_FIELDS.
// [LAW:single-enforcer] validate_and_sanitize_settings is the only gate in front of save_settings.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping

import barconf.io.paths
from barconf.errors import CorruptedError, FileWriteError, ValidationError
from barconf.io.atomic import write_json_atomic
from barconf.io.documents import read_json

logger = logging.getLogger(__name__)


# ─── Field definitions ───────────────────────────────────────────────────────
#
# Policy is fixed per field type: choices and booleans reject, ranges clamp.
# A value of the wrong JSON type is always rejected.


@dataclass(frozen=True)
class ChoiceFieldDef:
    key: str
    default: str
    choices: tuple[str, ...]

    def sanitize(self, value: object) -> str:
        if not isinstance(value, str) or value not in self.choices:
            raise ValidationError(
                f"must be one of {', '.join(self.choices)}; got {value!r}",
                field=self.key,
            )
        return value


@dataclass(frozen=True)
class RangeFieldDef:
    key: str
    default: int | float
    minimum: int | float
    maximum: int | float
    integer: bool = True

    def sanitize(self, value: object) -> int | float:
        # bool is an int subclass; a toggle is never a number here.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"must be a number; got {value!r}", field=self.key)
        if self.integer and not isinstance(value, int):
            if not float(value).is_integer():
                raise ValidationError(f"must be an integer; got {value!r}", field=self.key)
            value = int(value)
        if isinstance(value, float) and math.isnan(value):
            raise ValidationError("must be a number; got NaN", field=self.key)
        clamped = min(max(value, self.minimum), self.maximum)
        if clamped != value:
            logger.info("clamped setting %s from %r to %r", self.key, value, clamped)
        return int(clamped) if self.integer else float(clamped)


@dataclass(frozen=True)
class BoolFieldDef:
    key: str
    default: bool

    def sanitize(self, value: object) -> bool:
        if not isinstance(value, bool):
            raise ValidationError(f"must be true or false; got {value!r}", field=self.key)
        return value


FieldDef = ChoiceFieldDef | RangeFieldDef | BoolFieldDef


SETTINGS_FIELDS: tuple[FieldDef, ...] = (
    ChoiceFieldDef("theme", "system", ("system", "light", "dark")),
    ChoiceFieldDef("language", "en", ("en", "de", "es", "fr", "pt-BR")),
    ChoiceFieldDef("log_level", "INFO", ("DEBUG", "INFO", "WARNING", "ERROR")),
    RangeFieldDef("ui_scale", 1.0, 0.75, 2.0, integer=False),
    RangeFieldDef("font_size", 13, 10, 24),
    RangeFieldDef("autosave_delay_ms", 800, 100, 10_000),
    RangeFieldDef("backup_count", 5, 0, 50),
    BoolFieldDef("animations_enabled", True),
    BoolFieldDef("start_minimized", False),
    BoolFieldDef("show_tray_icon", True),
)

_FIELDS_BY_KEY: dict[str, FieldDef] = {f.key: f for f in SETTINGS_FIELDS}


@dataclass(frozen=True)
class AppSettings:
    theme: str
    language: str
    log_level: str
    ui_scale: float
    font_size: int
    autosave_delay_ms: int
    backup_count: int
    animations_enabled: bool
    start_minimized: bool
    show_tray_icon: bool

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def default_settings() -> AppSettings:
    return AppSettings(**{f.key: f.default for f in SETTINGS_FIELDS})


def _sanitize_mapping(candidate: Mapping[str, object]) -> AppSettings:
    unknown = sorted(str(k) for k in candidate if k not in _FIELDS_BY_KEY)
    if unknown:
        raise ValidationError("unknown setting", field=unknown[0])
    missing = [f.key for f in SETTINGS_FIELDS if f.key not in candidate]
    if missing:
        raise ValidationError("missing setting", field=missing[0])
    return AppSettings(**{f.key: f.sanitize(candidate[f.key]) for f in SETTINGS_FIELDS})


def validate_and_sanitize_settings(candidate: AppSettings | Mapping[str, object]) -> AppSettings:
    """Apply each field's clamp-or-reject policy to a full settings document.

    Raises:
        ValidationError: naming the first offending field (unknown key,
            missing key, wrong type, or a value outside a reject-policy field).
    """
    if isinstance(candidate, AppSettings):
        candidate = candidate.to_dict()
    if not isinstance(candidate, Mapping):
        raise ValidationError(f"settings must be an object; got {type(candidate).__name__}")
    return _sanitize_mapping(candidate)


def load_settings(path: Path | None = None) -> AppSettings:
    """Load settings from disk.

    A missing file yields the defaults and is not an error. A malformed file is
    reported, never overwritten: the caller decides whether to fall back.

    Raises:
        JsonParseError: the file is not valid JSON.
        CorruptedError: valid JSON of the wrong shape or with out-of-policy values.
        FileReadError: any other read failure.
    """
    path = path or barconf.io.paths.get_settings_path()
    try:
        raw = read_json(path)
    except FileNotFoundError:
        logger.info("no settings file at %s; using defaults", path)
        return default_settings()
    if not isinstance(raw, dict):
        raise CorruptedError(
            f"settings document must be an object; got {type(raw).__name__}", path=path
        )
    # Filter disk data to known keys; absent keys take their defaults.
    merged = {f.key: raw.get(f.key, f.default) for f in SETTINGS_FIELDS}
    try:
        return _sanitize_mapping(merged)
    except ValidationError as exc:
        raise CorruptedError(exc.detail, path=path, field=exc.field) from exc


def save_settings(settings: AppSettings, path: Path | None = None) -> None:
    """Atomically write an already-validated settings document."""
    path = path or barconf.io.paths.get_settings_path()
    try:
        write_json_atomic(path, settings.to_dict())
    except OSError as exc:
        raise FileWriteError(f"unable to write settings: {exc}", path=path) from exc
    logger.info("saved settings to %s", path)


def reset_to_defaults(path: Path | None = None) -> AppSettings:
    """Overwrite the stored document with the built-in defaults and return them."""
    defaults = default_settings()
    save_settings(defaults, path)
    logger.info("reset settings to defaults")
    return defaults
