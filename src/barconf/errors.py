"""Typed error vocabulary shared by every barconf store.

// [LAW:one-source-of-truth] Failure kinds are declared here and nowhere else.
// [LAW:single-enforcer] Only barconf.commands turns these into user-facing text.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    CORRUPTED = "corrupted"
    FILE_READ = "file_read"
    FILE_WRITE = "file_write"
    JSON_PARSE = "json_parse"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class BarconfError(Exception):
    """Base for all barconf failures.

    Subclasses pin ``kind``; callers branch on the kind, never on message text.
    """

    kind: ErrorKind

    def __init__(
        self,
        detail: str,
        *,
        path: str | Path | None = None,
        field: str | None = None,
    ) -> None:
        self.detail = detail
        self.path = str(path) if path is not None else None
        self.field = field
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [self.detail]
        if self.field:
            parts.append(f"field={self.field}")
        if self.path:
            parts.append(f"path={self.path}")
        return " ".join(parts) if len(parts) == 1 else f"{parts[0]} ({', '.join(parts[1:])})"


class CorruptedError(BarconfError):
    kind = ErrorKind.CORRUPTED


class FileReadError(BarconfError):
    kind = ErrorKind.FILE_READ


class FileWriteError(BarconfError):
    kind = ErrorKind.FILE_WRITE


class JsonParseError(BarconfError):
    kind = ErrorKind.JSON_PARSE


class ValidationError(BarconfError):
    kind = ErrorKind.VALIDATION


class NotFoundError(BarconfError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(BarconfError):
    kind = ErrorKind.CONFLICT
