"""Event log record models and their JSON-line encoding.

Decoupled from reviewgate_core so the store layer can be used independently
and reviewgate_core has no knowledge of how records are laid out on disk.

Each record is one JSON object on one line. The ``event`` key is the
discriminator:

  {"timestamp": "2024-05-01T12:00:00Z", "event": "file_modified", "file": "a.py", "tool": "Edit"}
  {"timestamp": "2024-05-01T12:05:00Z", "event": "review_triggered", "files": ["a.py"]}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

logger = logging.getLogger(__name__)

FILE_MODIFIED = "file_modified"
REVIEW_TRIGGERED = "review_triggered"


def utc_now() -> str:
    """RFC3339 UTC timestamp with second resolution."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class FileModified:
    """A tracked tool wrote to a file."""

    file: str
    tool: str
    timestamp: str = field(default_factory=utc_now)

    event = FILE_MODIFIED


@dataclass(frozen=True)
class ReviewTriggered:
    """A review was requested for ``files``.

    Marks every FileModified record before it as reviewed.
    """

    files: tuple[str, ...]
    timestamp: str = field(default_factory=utc_now)

    event = REVIEW_TRIGGERED


LogRecord = Union[FileModified, ReviewTriggered]


@dataclass(frozen=True)
class AppendResult:
    """Outcome of a log append — returned instead of raised.

    Callers that must never fail (the PostToolUse hook) inspect ``ok`` and
    log; tests assert on it directly.
    """

    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> AppendResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, exc: BaseException) -> AppendResult:
        return cls(ok=False, error=f"{type(exc).__name__}: {exc}")


def is_marker(record: LogRecord) -> bool:
    return isinstance(record, ReviewTriggered)


def to_dict(record: LogRecord) -> dict:
    if isinstance(record, FileModified):
        return {
            "timestamp": record.timestamp,
            "event": FILE_MODIFIED,
            "file": record.file,
            "tool": record.tool,
        }
    return {
        "timestamp": record.timestamp,
        "event": REVIEW_TRIGGERED,
        "files": list(record.files),
    }


def from_dict(d: dict) -> LogRecord | None:
    """Build a record from a decoded JSON object, or None if it is not one we know.

    Any ``review_triggered`` object is a marker, even with a missing or bad
    ``files`` payload.
    """
    event = d.get("event")
    timestamp = d.get("timestamp")
    if not isinstance(timestamp, str):
        timestamp = ""

    if event == FILE_MODIFIED:
        file = d.get("file")
        if not isinstance(file, str) or not file:
            return None
        tool = d.get("tool")
        return FileModified(file=file, tool=tool if isinstance(tool, str) else "", timestamp=timestamp)

    if event == REVIEW_TRIGGERED:
        files = d.get("files")
        if not isinstance(files, list):
            files = []
        return ReviewTriggered(files=tuple(f for f in files if isinstance(f, str)), timestamp=timestamp)

    return None


def encode_line(record: LogRecord) -> str:
    """Encode a record as a single newline-terminated JSON line."""
    return json.dumps(to_dict(record), separators=(",", ":"), ensure_ascii=False) + "\n"


def decode_line(line: str) -> LogRecord | None:
    """Decode one log line. Blank, malformed or unknown lines return None."""
    line = line.strip()
    if not line:
        return None
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed log line: %.80s", line)
        return None
    if not isinstance(data, dict):
        return None
    return from_dict(data)
