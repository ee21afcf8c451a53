"""Waybar profile data model and the snapshot composer.

Pure transforms only: profile fragments in, snapshots / live documents out,
and payloads back into profile fragments. Nothing here touches the disk.

// [LAW:dataflow-not-control-flow] Every function is data in, data out.
// [LAW:one-source-of-truth] The Waybar config shape (regions, bar keys) is declared here.
"""

from __future__ import annotations

import copy
import json
import re
from dataclasses import dataclass, field, replace
from typing import Mapping

from barconf.errors import ValidationError


# Layout region → key Waybar reads the module list from.
LAYOUT_REGIONS: dict[str, str] = {
    "left": "modules-left",
    "center": "modules-center",
    "right": "modules-right",
}

# Bar-wide options modelled as "globals". Anything else unknown is passthrough.
WAYBAR_GLOBAL_KEYS = frozenset({
    "layer",
    "output",
    "position",
    "height",
    "width",
    "spacing",
    "margin",
    "margin-top",
    "margin-right",
    "margin-bottom",
    "margin-left",
    "mode",
    "start_hidden",
    "modifier-reset",
    "exclusive",
    "fixed-center",
    "passthrough",
    "ipc",
    "id",
    "name",
    "gtk-layer-shell",
})

MODULE_OVERRIDES_HEADER = "/* barconf: module overrides */"

_PAYLOAD_FIELDS = ("layout", "globals", "modules", "passthrough", "style_css", "module_styles")
# Snapshot identity keys a caller may echo back in a payload; they are ignored.
_SNAPSHOT_ONLY_FIELDS = ("profile_id", "profile_name")


# ─── Data model ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WaybarLayout:
    left: tuple[str, ...] = ()
    center: tuple[str, ...] = ()
    right: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {"left": list(self.left), "center": list(self.center), "right": list(self.right)}


@dataclass(frozen=True)
class WaybarProfile:
    """A stored profile: identity plus every fragment it is built from."""

    profile_id: str
    name: str
    created_at: str
    layout: WaybarLayout = field(default_factory=WaybarLayout)
    modules: dict[str, dict[str, object]] = field(default_factory=dict)
    globals: dict[str, object] = field(default_factory=dict)
    passthrough: dict[str, object] = field(default_factory=dict)
    style_css: str = ""
    module_styles: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class WaybarConfigSnapshot:
    """Caller-facing, flattened view of one profile. Never persisted as-is."""

    profile_id: str
    profile_name: str
    layout: WaybarLayout
    modules: dict[str, dict[str, object]]
    globals: dict[str, object]
    passthrough: dict[str, object]
    style_css: str
    module_styles: dict[str, str | None]

    def to_dict(self) -> dict[str, object]:
        return {
            "profile_id": self.profile_id,
            "profile_name": self.profile_name,
            "layout": self.layout.to_dict(),
            "modules": copy.deepcopy(self.modules),
            "globals": copy.deepcopy(self.globals),
            "passthrough": copy.deepcopy(self.passthrough),
            "style_css": self.style_css,
            "module_styles": dict(self.module_styles),
        }


@dataclass(frozen=True)
class SaveWaybarConfigPayload:
    """Whole-document replacement for the active profile's content.

    Omitted fields are empty, not "unchanged": a caller that wants to keep a
    field must copy it forward from the current snapshot.
    """

    layout: WaybarLayout = field(default_factory=WaybarLayout)
    globals: dict[str, object] = field(default_factory=dict)
    modules: dict[str, dict[str, object]] = field(default_factory=dict)
    passthrough: dict[str, object] = field(default_factory=dict)
    style_css: str = ""
    module_styles: dict[str, str | None] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: object) -> SaveWaybarConfigPayload:
        if not isinstance(raw, Mapping):
            raise ValidationError(f"payload must be an object; got {type(raw).__name__}")
        unknown = sorted(
            str(k) for k in raw if k not in _PAYLOAD_FIELDS and k not in _SNAPSHOT_ONLY_FIELDS
        )
        if unknown:
            raise ValidationError("unknown payload field", field=unknown[0])
        return validate_payload(
            cls(
                layout=parse_layout(raw.get("layout", {}), "layout"),
                globals=raw.get("globals", {}),
                modules=raw.get("modules", {}),
                passthrough=raw.get("passthrough", {}),
                style_css=raw.get("style_css", ""),
                module_styles=raw.get("module_styles", {}),
            )
        )

    @classmethod
    def from_snapshot(cls, snapshot: WaybarConfigSnapshot, **changes) -> SaveWaybarConfigPayload:
        """Copy every field of ``snapshot`` forward, overriding ``changes``."""
        payload = cls(
            layout=snapshot.layout,
            globals=copy.deepcopy(snapshot.globals),
            modules=copy.deepcopy(snapshot.modules),
            passthrough=copy.deepcopy(snapshot.passthrough),
            style_css=snapshot.style_css,
            module_styles=dict(snapshot.module_styles),
        )
        return replace(payload, **changes)


# ─── Shape checks ────────────────────────────────────────────────────────────


def parse_layout(raw: object, field_name: str) -> WaybarLayout:
    if isinstance(raw, WaybarLayout):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raise ValidationError("layout must be an object", field=field_name)
    unknown = sorted(str(k) for k in raw if k not in LAYOUT_REGIONS)
    if unknown:
        raise ValidationError("unknown layout region", field=f"{field_name}.{unknown[0]}")
    regions: dict[str, tuple[str, ...]] = {}
    for region in LAYOUT_REGIONS:
        entries = raw.get(region, [])
        if not isinstance(entries, (list, tuple)):
            raise ValidationError("layout region must be a list", field=f"{field_name}.{region}")
        for entry in entries:
            if not isinstance(entry, str) or not entry.strip():
                raise ValidationError(
                    f"module ids must be non-empty strings; got {entry!r}",
                    field=f"{field_name}.{region}",
                )
        regions[region] = tuple(entries)
    return WaybarLayout(**regions)


def require_object(raw: object, field_name: str) -> dict:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"must be an object; got {type(raw).__name__}", field=field_name)
    for key in raw:
        if not isinstance(key, str) or not key:
            raise ValidationError(f"keys must be non-empty strings; got {key!r}", field=field_name)
    return dict(raw)


def _require_json(value: object, field_name: str) -> None:
    try:
        json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"not representable as JSON: {exc}", field=field_name) from exc


def parse_modules(raw: object, field_name: str) -> dict[str, dict[str, object]]:
    modules = require_object(raw, field_name)
    for module_id, definition in modules.items():
        if not isinstance(definition, Mapping):
            raise ValidationError("module definition must be an object", field=f"{field_name}.{module_id}")
        if module_id in WAYBAR_GLOBAL_KEYS or module_id in LAYOUT_REGIONS.values():
            raise ValidationError("module id collides with a bar key", field=f"{field_name}.{module_id}")
    return modules


def parse_globals(raw: object, field_name: str) -> dict[str, object]:
    bar_options = require_object(raw, field_name)
    unknown = sorted(k for k in bar_options if k not in WAYBAR_GLOBAL_KEYS)
    if unknown:
        raise ValidationError("not a Waybar bar option", field=f"{field_name}.{unknown[0]}")
    return bar_options


def parse_module_styles(raw: object, field_name: str) -> dict[str, str | None]:
    styles = require_object(raw, field_name)
    for module_id, css in styles.items():
        if css is not None and not isinstance(css, str):
            raise ValidationError("module style must be CSS text or null", field=f"{field_name}.{module_id}")
    return styles


def validate_payload(payload: SaveWaybarConfigPayload) -> SaveWaybarConfigPayload:
    """Check every field of a save payload and return a normalized copy.

    Raises:
        ValidationError: naming the offending field.
    """
    layout = parse_layout(payload.layout, "layout")
    modules = parse_modules(payload.modules, "modules")
    bar_options = parse_globals(payload.globals, "globals")
    passthrough = require_object(payload.passthrough, "passthrough")
    module_styles = parse_module_styles(payload.module_styles, "module_styles")
    if not isinstance(payload.style_css, str):
        raise ValidationError("must be CSS text", field="style_css")

    taken = set(LAYOUT_REGIONS.values()) | set(bar_options) | set(modules)
    for key in sorted(passthrough):
        if key in taken:
            raise ValidationError("passthrough key collides with a modelled key", field=f"passthrough.{key}")

    _require_json(modules, "modules")
    _require_json(bar_options, "globals")
    _require_json(passthrough, "passthrough")

    return SaveWaybarConfigPayload(
        layout=layout,
        globals=copy.deepcopy(bar_options),
        modules=copy.deepcopy(modules),
        passthrough=copy.deepcopy(passthrough),
        style_css=payload.style_css,
        module_styles=dict(module_styles),
    )


# ─── Composition ─────────────────────────────────────────────────────────────


def snapshot_from_profile(profile: WaybarProfile) -> WaybarConfigSnapshot:
    return WaybarConfigSnapshot(
        profile_id=profile.profile_id,
        profile_name=profile.name,
        layout=profile.layout,
        modules=copy.deepcopy(profile.modules),
        globals=copy.deepcopy(profile.globals),
        passthrough=copy.deepcopy(profile.passthrough),
        style_css=profile.style_css,
        module_styles=dict(profile.module_styles),
    )


def apply_payload(profile: WaybarProfile, payload: SaveWaybarConfigPayload) -> WaybarProfile:
    """Replace every content fragment of ``profile``; identity is preserved."""
    valid = validate_payload(payload)
    return replace(
        profile,
        layout=valid.layout,
        modules=valid.modules,
        globals=valid.globals,
        passthrough=valid.passthrough,
        style_css=valid.style_css,
        module_styles=valid.module_styles,
    )


def render_waybar_config(profile: WaybarProfile) -> dict[str, object]:
    """Compose the single JSON object Waybar reads as its config.

    Order: globals, passthrough, the three module lists, then module
    definitions sorted by id.
    """
    config: dict[str, object] = {}
    config.update(copy.deepcopy(profile.globals))
    config.update(copy.deepcopy(profile.passthrough))
    layout = profile.layout.to_dict()
    for region, waybar_key in LAYOUT_REGIONS.items():
        config[waybar_key] = layout[region]
    for module_id in sorted(profile.modules):
        config[module_id] = copy.deepcopy(profile.modules[module_id])
    return config


_SELECTOR_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]+")


def module_selector(module_id: str) -> str:
    """Return the CSS id selector Waybar gives a module.

    ``clock`` → ``#clock``, ``custom/omarchy`` → ``#custom-omarchy``;
    compositor modules drop their namespace (``hyprland/workspaces`` →
    ``#workspaces``). An instance suffix becomes a class:
    ``battery#bat2`` → ``#battery.bat2``.
    """
    base, _, instance = module_id.partition("#")
    if instance:
        return f"{module_selector(base)}.{_SELECTOR_UNSAFE_RE.sub('-', instance)}"
    prefix, sep, rest = base.partition("/")
    if sep and prefix not in ("custom", "group"):
        base = rest
    return f"#{_SELECTOR_UNSAFE_RE.sub('-', base).strip('-')}"


def render_style_css(style_css: str, module_styles: Mapping[str, str | None]) -> str:
    """Compose the live stylesheet: the profile CSS plus module overrides.

    An override containing ``{`` is emitted verbatim; otherwise it is a list of
    declarations and gets wrapped in the module's selector.
    """
    blocks: list[str] = []
    for module_id in sorted(module_styles):
        css = (module_styles[module_id] or "").strip()
        if not css:
            continue
        if "{" in css:
            blocks.append(f"/* {module_id} */\n{css}")
        else:
            blocks.append(f"/* {module_id} */\n{module_selector(module_id)} {{\n  {css}\n}}")
    if not blocks:
        return style_css
    base = style_css.rstrip("\n")
    separator = "\n\n" if base else ""
    return base + separator + MODULE_OVERRIDES_HEADER + "\n" + "\n\n".join(blocks) + "\n"
