"""Waybar configuration service: snapshot and profile operations.

Every public method holds the repository lock for its whole duration, so two
callers in one process never interleave their persist steps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from barconf.app.live_sync import LiveSync
from barconf.app.profile_repository import ProfileRepository, ProfileSummary
from barconf.app.snapshot import (
    SaveWaybarConfigPayload,
    WaybarConfigSnapshot,
    apply_payload,
    snapshot_from_profile,
)
from barconf.errors import BarconfError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ProfileListResponse:
    profiles: tuple[ProfileSummary, ...]
    active_profile_id: str

    def to_dict(self) -> dict[str, object]:
        return {
            "profiles": [p.to_dict() for p in self.profiles],
            "active_profile_id": self.active_profile_id,
        }


@dataclass(frozen=True)
class ProfileChangeResponse:
    """Result of create/select/delete: the affected profile plus refreshed state."""

    profile: ProfileSummary
    profiles: tuple[ProfileSummary, ...]
    active_profile_id: str | None
    snapshot: WaybarConfigSnapshot | None

    def to_dict(self) -> dict[str, object]:
        return {
            "profile": self.profile.to_dict(),
            "profiles": [p.to_dict() for p in self.profiles],
            "active_profile_id": self.active_profile_id,
            "snapshot": self.snapshot.to_dict() if self.snapshot is not None else None,
        }


class WaybarConfigService:
    def __init__(self, repository: ProfileRepository) -> None:
        self.repository = repository

    @classmethod
    def from_paths(
        cls,
        profiles_dir: Path | None = None,
        live_dir: Path | None = None,
    ) -> WaybarConfigService:
        """Build the service over the configured (or given) locations."""
        return cls(ProfileRepository(profiles_dir, live_sync=LiveSync(live_dir)))

    # ─── Snapshot ────────────────────────────────────────────────────────────

    def load_snapshot(self) -> WaybarConfigSnapshot:
        with self.repository.lock:
            return snapshot_from_profile(self.repository.active_profile())

    def save_snapshot(self, payload: SaveWaybarConfigPayload) -> WaybarConfigSnapshot:
        """Replace the active profile's content wholesale and return it re-read from disk."""
        with self.repository.lock:
            active = self.repository.active_profile()
            self.repository.write_profile(apply_payload(active, payload))
            return snapshot_from_profile(self.repository.load_profile(active.profile_id))

    def get_style(self) -> str:
        return self.load_snapshot().style_css

    def save_style(self, style_css: str) -> str:
        """Replace only the stylesheet, copying every other field forward."""
        with self.repository.lock:
            current = self.load_snapshot()
            payload = SaveWaybarConfigPayload.from_snapshot(current, style_css=style_css)
            return self.save_snapshot(payload).style_css

    # ─── Profiles ────────────────────────────────────────────────────────────

    def list_profiles(self) -> ProfileListResponse:
        with self.repository.lock:
            return ProfileListResponse(
                profiles=tuple(self.repository.list_profiles()),
                active_profile_id=self.repository.active_profile_id(),
            )

    def create_profile(self, name: str) -> ProfileChangeResponse:
        with self.repository.lock:
            created = self.repository.create_profile(name)
            return self._change_response(
                ProfileSummary(profile_id=created.profile_id, name=created.name, is_active=False)
            )

    def select_profile(self, profile_id: str) -> ProfileChangeResponse:
        with self.repository.lock:
            selected = self.repository.select_profile(profile_id)
            return self._change_response(
                ProfileSummary(profile_id=selected.profile_id, name=selected.name, is_active=True)
            )

    def delete_profile(self, profile_id: str) -> ProfileChangeResponse:
        with self.repository.lock:
            return self._change_response(self.repository.delete_profile(profile_id))

    def reset_active_profile_to_defaults(self) -> WaybarConfigSnapshot:
        with self.repository.lock:
            return self.repository.reset_active_profile_to_defaults()

    def _change_response(self, affected: ProfileSummary) -> ProfileChangeResponse:
        """Describe the store after a change that has already been persisted.

        Unrelated broken state (a dangling active pointer, an unreadable active
        profile) leaves the matching field empty instead of failing the change.
        """
        profiles = self._read_after_change("profile list", self.repository.list_profiles)
        active_id = self._read_after_change("active profile id", self.repository.active_profile_id)
        snapshot = None
        if active_id is not None:
            snapshot = self._read_after_change("active snapshot", self.load_snapshot)
        return ProfileChangeResponse(
            profile=affected,
            profiles=tuple(profiles) if profiles is not None else (),
            active_profile_id=active_id,
            snapshot=snapshot,
        )

    @staticmethod
    def _read_after_change(what: str, read: Callable[[], T]) -> T | None:
        try:
            return read()
        except BarconfError as exc:
            logger.warning("profile change saved, but the %s is unavailable: %s", what, exc)
            return None
