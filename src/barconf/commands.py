"""Operation surface consumed by the front-end dispatch layer.

Each operation returns a CommandResult: a JSON-ready value on success, or a
human-readable message plus the typed error kind on failure. Message wording
is decided here and only here; the stores underneath expose error kinds.

Hold one Commands instance per process: its service lock is what serializes
concurrent operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import barconf.app.settings_store as settings_store
from barconf.app.snapshot import SaveWaybarConfigPayload
from barconf.app.waybar_service import WaybarConfigService
from barconf.errors import BarconfError, ErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    value: object = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# [LAW:dataflow-not-control-flow] Per-kind wording is a lookup table, not a branch ladder.
_LOAD_SETTINGS_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.CORRUPTED: "Settings file is corrupted. Default settings will be used.",
    ErrorKind.FILE_READ: "Unable to read settings file. Please check file permissions.",
    ErrorKind.JSON_PARSE: "Settings file format is invalid. Default settings will be used.",
}


def _load_settings_message(error: BarconfError) -> str:
    return _LOAD_SETTINGS_MESSAGES.get(error.kind, f"Unable to load settings: {error}")


def _prefixed(prefix: str) -> Callable[[BarconfError], str]:
    return lambda error: f"{prefix}: {error}"


class Commands:
    def __init__(
        self,
        service: WaybarConfigService | None = None,
        settings_path: Path | None = None,
    ) -> None:
        self.service = service or WaybarConfigService.from_paths()
        self.settings_path = settings_path

    def _run(
        self,
        action: str,
        operation: Callable[[], object],
        message_for: Callable[[BarconfError], str],
    ) -> CommandResult:
        logger.info("%s", action)
        try:
            value = operation()
        except BarconfError as error:
            logger.error("%s failed: %s", action, error)
            return CommandResult(error=message_for(error), error_kind=error.kind)
        return CommandResult(value=value)

    # ─── Settings ────────────────────────────────────────────────────────────

    def get_settings(self) -> CommandResult:
        return self._run(
            "loading app settings",
            lambda: settings_store.load_settings(self.settings_path).to_dict(),
            _load_settings_message,
        )

    def update_settings(self, document: object) -> CommandResult:
        def _update():
            validated = settings_store.validate_and_sanitize_settings(document)
            settings_store.save_settings(validated, self.settings_path)
            return validated.to_dict()

        def _message(error: BarconfError) -> str:
            if error.kind is ErrorKind.VALIDATION:
                return f"Invalid settings provided: {error}"
            return (
                "Unable to save settings. Please check file permissions and try again: "
                f"{error}"
            )

        return self._run("updating app settings", _update, _message)

    def reset_settings(self) -> CommandResult:
        return self._run(
            "resetting app settings to defaults",
            lambda: settings_store.reset_to_defaults(self.settings_path).to_dict(),
            _prefixed("Unable to reset settings to defaults. Please try again"),
        )

    # ─── Waybar snapshot ─────────────────────────────────────────────────────

    def get_snapshot(self) -> CommandResult:
        return self._run(
            "loading Waybar config snapshot",
            lambda: self.service.load_snapshot().to_dict(),
            _prefixed("Unable to load Waybar configuration"),
        )

    def save_snapshot(self, payload: object) -> CommandResult:
        def _save():
            parsed = (
                payload
                if isinstance(payload, SaveWaybarConfigPayload)
                else SaveWaybarConfigPayload.from_dict(payload)
            )
            return self.service.save_snapshot(parsed).to_dict()

        return self._run(
            "saving Waybar config snapshot",
            _save,
            _prefixed("Unable to save Waybar configuration"),
        )

    def get_style(self) -> CommandResult:
        return self._run(
            "loading Waybar style",
            self.service.get_style,
            _prefixed("Unable to load Waybar style"),
        )

    def save_style(self, style_css: str) -> CommandResult:
        return self._run(
            "saving Waybar style",
            lambda: self.service.save_style(style_css),
            _prefixed("Unable to save Waybar style"),
        )

    def reset_active_profile(self) -> CommandResult:
        return self._run(
            "resetting active Waybar profile to defaults",
            lambda: self.service.reset_active_profile_to_defaults().to_dict(),
            _prefixed("Unable to reset Waybar profile to defaults"),
        )

    # ─── Profiles ────────────────────────────────────────────────────────────

    def list_profiles(self) -> CommandResult:
        return self._run(
            "listing Waybar profiles",
            lambda: self.service.list_profiles().to_dict(),
            _prefixed("Unable to list Waybar profiles"),
        )

    def create_profile(self, name: str) -> CommandResult:
        return self._run(
            f"creating Waybar profile {name!r}",
            lambda: self.service.create_profile(name).to_dict(),
            _prefixed("Unable to create Waybar profile"),
        )

    def select_profile(self, profile_id: str) -> CommandResult:
        return self._run(
            f"selecting Waybar profile {profile_id!r}",
            lambda: self.service.select_profile(profile_id).to_dict(),
            _prefixed("Unable to select Waybar profile"),
        )

    def delete_profile(self, profile_id: str) -> CommandResult:
        return self._run(
            f"deleting Waybar profile {profile_id!r}",
            lambda: self.service.delete_profile(profile_id).to_dict(),
            _prefixed("Unable to delete Waybar profile"),
        )
