"""Mirror the active profile into the files the Waybar process reads.

Each destination file is replaced atomically, so Waybar never sees a torn
config. A failed sync does not roll back the profile store; syncing the same
profile again is idempotent and repairs the mirror.
"""

from __future__ import annotations

import logging
from pathlib import Path

import barconf.io.paths
from barconf.app.snapshot import WaybarProfile, render_style_css, render_waybar_config
from barconf.errors import FileWriteError
from barconf.io.atomic import dump_json, write_text_atomic

logger = logging.getLogger(__name__)

LIVE_CONFIG_NAME = "config.jsonc"
LIVE_STYLE_NAME = "style.css"


class LiveSync:
    """Writes the rendered config + stylesheet for one profile into ``dest_dir``."""

    def __init__(self, dest_dir: Path | None = None) -> None:
        self.dest_dir = dest_dir or barconf.io.paths.get_live_waybar_dir()

    @property
    def config_path(self) -> Path:
        return self.dest_dir / LIVE_CONFIG_NAME

    @property
    def style_path(self) -> Path:
        return self.dest_dir / LIVE_STYLE_NAME

    def sync(self, profile: WaybarProfile) -> None:
        """Render ``profile`` and atomically replace both live files.

        Raises:
            FileWriteError: a destination could not be written. Files written
                before the failure stay in place.
        """
        outputs = (
            (self.config_path, dump_json(render_waybar_config(profile))),
            (self.style_path, render_style_css(profile.style_css, profile.module_styles)),
        )
        for path, text in outputs:
            try:
                write_text_atomic(path, text)
            except OSError as exc:
                raise FileWriteError(f"unable to write live Waybar file: {exc}", path=path) from exc
        logger.info("live sync wrote profile %s to %s", profile.profile_id, self.dest_dir)
