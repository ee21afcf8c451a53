"""Typed readers for barconf's on-disk documents.

FileNotFoundError is passed through untouched: whether an absent file means
"use defaults" or "corrupted profile" is the caller's decision.
"""

from __future__ import annotations

import json
from pathlib import Path

from barconf.errors import FileReadError, JsonParseError


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(f"unable to read file: {exc}", path=path) from exc


def read_json(path: Path) -> object:
    """Read and decode a JSON document.

    Raises:
        FileNotFoundError: the file does not exist.
        FileReadError: any other I/O failure.
        JsonParseError: the bytes are not valid JSON.
    """
    text = read_text(path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise JsonParseError(
            f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}",
            path=path,
        ) from exc
