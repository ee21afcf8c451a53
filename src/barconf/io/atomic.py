"""Atomic file writers.

Every barconf write goes through here: write a sibling temp file, flush and
fsync it, then os.replace() over the target. A reader sees either the old file
or the new one, never a torn write.

// [LAW:single-enforcer] The temp-then-rename discipline lives only in this module.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path


def write_text_atomic(path: Path, text: str) -> None:
    """Atomically replace ``path`` with ``text``.

    Creates parent directories if needed. Raises OSError on failure; the temp
    file is removed and the previous content of ``path`` is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def dump_json(data: object) -> str:
    """Serialize ``data`` the way every barconf JSON file is laid out on disk."""
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


def write_json_atomic(path: Path, data: object) -> None:
    write_text_atomic(path, dump_json(data))
