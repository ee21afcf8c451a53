"""On-disk store of Waybar profiles and the pointer to the active one.

Layout under the profiles root::

    active.json               {"active_profile_id": "<id>"}
    <id>/profile.json         {"id", "name", "created_at"}
    <id>/layout.json          {"left": [...], "center": [...], "right": [...]}
    <id>/modules.json
    <id>/globals.json
    <id>/passthrough.json
    <id>/style.css
    <id>/module-styles.json   {module_id: css | null}

Only directories holding a profile.json are profiles; anything else under the
root is ignored. Entries starting with "." are staging/trash directories;
left-over trash is swept on bootstrap.

Invariants held by every mutating method:
- the store contains at least one profile;
- exactly one id is active and it names an existing profile (unless the
  pointer was edited externally, which surfaces as NotFoundError on read).

Ordering is lexicographic by id, both for listing and for choosing the next
active profile when the active one is deleted.

// [LAW:single-enforcer] This class is the only writer of the profile store and active pointer.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import threading
import unicodedata
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import barconf.app.waybar_template as template
import barconf.io.paths
from barconf.app.live_sync import LiveSync
from barconf.app.snapshot import (
    WaybarConfigSnapshot,
    WaybarProfile,
    parse_globals,
    parse_layout,
    parse_module_styles,
    parse_modules,
    require_object,
    snapshot_from_profile,
)
from barconf.errors import (
    BarconfError,
    ConflictError,
    CorruptedError,
    FileReadError,
    FileWriteError,
    NotFoundError,
    ValidationError,
)
from barconf.io.atomic import write_json_atomic, write_text_atomic
from barconf.io.documents import read_json, read_text

logger = logging.getLogger(__name__)

ACTIVE_POINTER_NAME = "active.json"
PROFILE_META_NAME = "profile.json"
LAYOUT_NAME = "layout.json"
MODULES_NAME = "modules.json"
GLOBALS_NAME = "globals.json"
PASSTHROUGH_NAME = "passthrough.json"
STYLE_NAME = "style.css"
MODULE_STYLES_NAME = "module-styles.json"

_SLUG_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class ProfileSummary:
    profile_id: str
    name: str
    is_active: bool

    def to_dict(self) -> dict[str, object]:
        return {"id": self.profile_id, "name": self.name, "is_active": self.is_active}


def slugify_profile_name(name: str) -> str:
    """Derive the stable profile id for a human-readable name."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return _SLUG_RE.sub("-", ascii_name.lower()).strip("-")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def template_profile(profile_id: str, name: str, created_at: str) -> WaybarProfile:
    return WaybarProfile(
        profile_id=profile_id,
        name=name,
        created_at=created_at,
        layout=parse_layout(template.template_layout(), "layout"),
        modules=template.template_modules(),
        globals=template.template_globals(),
        passthrough=template.template_passthrough(),
        style_css=template.template_style_css(),
        module_styles={},
    )


class ProfileRepository:
    """Thread-safe CRUD over the profile directory plus the active pointer.

    ``live_sync`` is invoked whenever the active profile's identity or content
    changes. Its failures propagate as FileWriteError after the profile change
    itself has been persisted.
    """

    def __init__(self, root: Path | None = None, live_sync: LiveSync | None = None) -> None:
        self.root = root or barconf.io.paths.get_profiles_dir()
        self._live_sync = live_sync
        self._lock = threading.RLock()
        self._initialized = False

    @property
    def lock(self) -> threading.RLock:
        """Held for the whole of every operation; callers composing operations may hold it too."""
        return self._lock

    # ─── Bootstrap ───────────────────────────────────────────────────────────

    def ensure_initialized(self) -> None:
        """Create the bundled default profile on first use.

        The live files are not written here: a fresh install must not clobber
        an existing Waybar setup until the user selects or edits a profile.
        """
        with self._lock:
            if self._initialized:
                return
            self._sweep_trash()
            ids = self._scan_ids()
            if not ids:
                profile = template_profile(
                    template.DEFAULT_PROFILE_ID, template.DEFAULT_PROFILE_NAME, _now_iso()
                )
                self._materialize(profile)
                self._write_active_id(profile.profile_id)
                logger.info("initialized profile store at %s with %s", self.root, profile.profile_id)
            elif self._read_active_id_or_none() is None:
                self._write_active_id(ids[0])
                logger.info("no active profile recorded; activated %s", ids[0])
            self._initialized = True

    # ─── Queries ─────────────────────────────────────────────────────────────

    def list_profiles(self) -> list[ProfileSummary]:
        with self._lock:
            self.ensure_initialized()
            active_id = self._read_active_id_or_none()
            return [
                ProfileSummary(
                    profile_id=pid,
                    name=self._display_name(pid),
                    is_active=pid == active_id,
                )
                for pid in self._scan_ids()
            ]

    def active_profile_id(self) -> str:
        with self._lock:
            self.ensure_initialized()
            active_id = self._read_active_id_or_none()
            if active_id is None:
                raise NotFoundError("no active profile recorded", path=self._pointer_path)
            return active_id

    def load_profile(self, profile_id: str) -> WaybarProfile:
        """Read every fragment of one profile.

        Raises:
            NotFoundError: no profile with this id.
            CorruptedError / JsonParseError / FileReadError: unreadable fragments.
        """
        with self._lock:
            self.ensure_initialized()
            self._require_exists(profile_id)
            meta = self._read_meta(profile_id)
            directory = self._profile_dir(profile_id)
            return WaybarProfile(
                profile_id=profile_id,
                name=str(meta["name"]),
                created_at=str(meta["created_at"]),
                layout=self._read_fragment(directory / LAYOUT_NAME, parse_layout),
                modules=self._read_fragment(directory / MODULES_NAME, parse_modules),
                globals=self._read_fragment(directory / GLOBALS_NAME, parse_globals),
                passthrough=self._read_fragment(directory / PASSTHROUGH_NAME, require_object),
                style_css=self._read_required_text(directory / STYLE_NAME),
                module_styles=self._read_fragment(directory / MODULE_STYLES_NAME, parse_module_styles),
            )

    def active_profile(self) -> WaybarProfile:
        """Load the active profile; a dangling pointer is NotFoundError, not repaired."""
        with self._lock:
            return self.load_profile(self.active_profile_id())

    # ─── Mutations ───────────────────────────────────────────────────────────

    def create_profile(self, name: str) -> WaybarProfile:
        """Materialize a new profile from the bundled template. Active profile is unchanged."""
        display_name = str(name or "").strip()
        if not display_name:
            raise ValidationError("profile name must not be empty", field="name")
        profile_id = slugify_profile_name(display_name)
        if not profile_id:
            raise ValidationError(
                f"profile name {display_name!r} has no letters or digits", field="name"
            )
        with self._lock:
            self.ensure_initialized()
            if self._profile_dir(profile_id).exists():
                raise ConflictError(f"profile {profile_id!r} already exists", field="name")
            profile = template_profile(profile_id, display_name, _now_iso())
            self._materialize(profile)
            logger.info("created profile %s (%r)", profile_id, display_name)
            return profile

    def select_profile(self, profile_id: str) -> WaybarProfile:
        """Mark ``profile_id`` active and mirror it into the live files.

        Selecting the already-active profile re-runs the live sync, which is how
        a diverged mirror is repaired.
        """
        with self._lock:
            profile = self.load_profile(profile_id)
            self._write_active_id(profile_id)
            logger.info("selected profile %s", profile_id)
            self._sync(profile)
            return profile

    def delete_profile(self, profile_id: str) -> ProfileSummary:
        """Remove a profile.

        Deleting the active profile activates the first remaining profile that
        loads cleanly, in lexicographic id order, and re-syncs the live files.
        Nothing is changed on disk until that fallback has been loaded.

        Raises:
            NotFoundError: no profile with this id.
            ConflictError: no other loadable profile would remain.
        """
        with self._lock:
            self.ensure_initialized()
            self._require_exists(profile_id)
            successor = self._first_loadable(exclude=profile_id)
            if successor is None:
                raise ConflictError(
                    f"cannot delete {profile_id!r}: it is the only remaining profile"
                )
            was_active = profile_id == self._read_active_id_or_none()
            summary = ProfileSummary(
                profile_id=profile_id,
                name=self._display_name(profile_id),
                is_active=was_active,
            )

            fallback = successor if was_active else None
            if fallback is not None:
                # Pointer moves first so it never names a vanished profile.
                self._write_active_id(fallback.profile_id)

            trash = self.root / f".trash-{profile_id}-{uuid.uuid4().hex[:8]}"
            try:
                os.rename(self._profile_dir(profile_id), trash)
            except OSError as exc:
                if fallback is not None:
                    self._write_active_id(profile_id)
                raise FileWriteError(
                    f"unable to remove profile {profile_id!r}: {exc}",
                    path=self._profile_dir(profile_id),
                ) from exc
            logger.info("deleted profile %s", profile_id)

            try:
                if fallback is not None:
                    logger.info("active profile fell back to %s", fallback.profile_id)
                    self._sync(fallback)
            finally:
                self._discard(trash)
            return summary

    def write_profile(self, profile: WaybarProfile) -> None:
        """Replace the content fragments of an existing profile, file by file.

        Re-syncs the live files when ``profile`` is the active one.
        """
        with self._lock:
            self.ensure_initialized()
            self._require_exists(profile.profile_id)
            self._write_fragments(self._profile_dir(profile.profile_id), profile)
            logger.info("saved profile %s", profile.profile_id)
            if profile.profile_id == self._read_active_id_or_none():
                self._sync(profile)

    def reset_active_profile_to_defaults(self) -> WaybarConfigSnapshot:
        """Overwrite the active profile's content with the bundled template.

        Id, name and creation time are kept.
        """
        with self._lock:
            active = self.active_profile()
            fresh = template_profile(active.profile_id, active.name, active.created_at)
            self._write_fragments(self._profile_dir(active.profile_id), fresh)
            logger.info("reset profile %s to defaults", active.profile_id)
            self._sync(fresh)
            return snapshot_from_profile(fresh)

    # ─── Internals ───────────────────────────────────────────────────────────

    @property
    def _pointer_path(self) -> Path:
        return self.root / ACTIVE_POINTER_NAME

    def _profile_dir(self, profile_id: str) -> Path:
        return self.root / profile_id

    def _scan_ids(self) -> list[str]:
        try:
            entries = list(self.root.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise FileReadError(f"unable to list profiles: {exc}", path=self.root) from exc
        return sorted(
            p.name
            for p in entries
            if not p.name.startswith(".") and (p / PROFILE_META_NAME).is_file()
        )

    def _require_exists(self, profile_id: str) -> None:
        if (
            not profile_id
            or profile_id.startswith(".")
            or "/" in profile_id
            or not (self._profile_dir(profile_id) / PROFILE_META_NAME).is_file()
        ):
            raise NotFoundError(f"profile {profile_id!r} does not exist", field="profile_id")

    def _sync(self, profile: WaybarProfile) -> None:
        if self._live_sync is not None:
            self._live_sync.sync(profile)

    def _read_active_id_or_none(self) -> str | None:
        try:
            raw = read_json(self._pointer_path)
        except FileNotFoundError:
            return None
        active_id = raw.get("active_profile_id") if isinstance(raw, dict) else None
        if not isinstance(active_id, str) or not active_id:
            raise CorruptedError("active profile pointer has the wrong shape", path=self._pointer_path)
        return active_id

    def _write_active_id(self, profile_id: str) -> None:
        try:
            write_json_atomic(self._pointer_path, {"active_profile_id": profile_id})
        except OSError as exc:
            raise FileWriteError(
                f"unable to record active profile: {exc}", path=self._pointer_path
            ) from exc

    def _read_meta(self, profile_id: str) -> dict[str, object]:
        path = self._profile_dir(profile_id) / PROFILE_META_NAME
        try:
            raw = read_json(path)
        except FileNotFoundError as exc:
            raise CorruptedError("profile metadata is missing", path=path) from exc
        if not isinstance(raw, dict):
            raise CorruptedError("profile metadata must be an object", path=path)
        for key in ("id", "name", "created_at"):
            if not isinstance(raw.get(key), str):
                raise CorruptedError("profile metadata field is missing or not text", path=path, field=key)
        if raw["id"] != profile_id:
            raise CorruptedError(
                f"profile metadata names {raw['id']!r} but lives in {profile_id!r}",
                path=path,
                field="id",
            )
        return raw

    def _display_name(self, profile_id: str) -> str:
        # A profile with broken metadata must still be listable and deletable.
        try:
            return str(self._read_meta(profile_id)["name"])
        except BarconfError as exc:
            logger.warning("profile %s has unreadable metadata: %s", profile_id, exc)
            return profile_id

    def _first_loadable(self, exclude: str) -> WaybarProfile | None:
        for pid in self._scan_ids():
            if pid == exclude:
                continue
            try:
                return self.load_profile(pid)
            except BarconfError as exc:
                logger.warning("skipping unloadable profile %s: %s", pid, exc)
        return None

    def _sweep_trash(self) -> None:
        try:
            leftovers = [p for p in self.root.iterdir() if p.name.startswith(".trash-")]
        except FileNotFoundError:
            return
        except OSError as exc:
            raise FileReadError(f"unable to list profiles: {exc}", path=self.root) from exc
        for trash in leftovers:
            self._discard(trash)

    def _discard(self, trash: Path) -> None:
        try:
            shutil.rmtree(trash)
        except FileNotFoundError:
            pass
        except OSError as exc:
            # Dot-prefixed, so never listed; removal is retried on the next bootstrap.
            logger.warning("unable to clean up %s: %s", trash, exc)

    def _read_fragment(self, path: Path, parse):
        try:
            raw = read_json(path)
        except FileNotFoundError as exc:
            raise CorruptedError("profile fragment is missing", path=path) from exc
        try:
            return parse(raw, path.stem)
        except ValidationError as exc:
            raise CorruptedError(exc.detail, path=path, field=exc.field) from exc

    def _read_required_text(self, path: Path) -> str:
        try:
            return read_text(path)
        except FileNotFoundError as exc:
            raise CorruptedError("profile fragment is missing", path=path) from exc

    def _write_fragments(self, directory: Path, profile: WaybarProfile) -> None:
        documents = (
            (directory / LAYOUT_NAME, profile.layout.to_dict()),
            (directory / MODULES_NAME, profile.modules),
            (directory / GLOBALS_NAME, profile.globals),
            (directory / PASSTHROUGH_NAME, profile.passthrough),
            (directory / MODULE_STYLES_NAME, profile.module_styles),
        )
        path = directory
        try:
            for path, data in documents:
                write_json_atomic(path, data)
            path = directory / STYLE_NAME
            write_text_atomic(path, profile.style_css)
        except OSError as exc:
            raise FileWriteError(f"unable to write profile fragment: {exc}", path=path) from exc

    def _materialize(self, profile: WaybarProfile) -> None:
        """Build the profile in a staging directory, then rename it into place."""
        staging = self.root / f".staging-{profile.profile_id}-{uuid.uuid4().hex[:8]}"
        target = self._profile_dir(profile.profile_id)
        try:
            staging.mkdir(parents=True)
            write_json_atomic(
                staging / PROFILE_META_NAME,
                {"id": profile.profile_id, "name": profile.name, "created_at": profile.created_at},
            )
            self._write_fragments(staging, profile)
            os.rename(staging, target)
        except (OSError, FileWriteError) as exc:
            shutil.rmtree(staging, ignore_errors=True)
            if target.exists():
                raise ConflictError(f"profile {profile.profile_id!r} already exists", field="name") from exc
            if isinstance(exc, FileWriteError):
                raise
            raise FileWriteError(f"unable to create profile: {exc}", path=target) from exc
