"""SQLiteEventLog — embedded-database backend for the event log.

Why SQLite as the alternative backend:
- Batteries included: ships with Python, no extra dependencies.
- Its own write locking replaces the flock file, which matters on network
  filesystems where flock is unreliable.
- The AUTOINCREMENT id is a monotonic append position, so ordering does not
  depend on timestamps with one-second resolution.

Schema:
  events — one row per record. The payload column holds the same JSON object
           the JSONL backend writes, so both backends decode identically.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from reviewgate_store.base import BaseEventLog, EventLogUnavailable
from reviewgate_store.models import AppendResult, from_dict, to_dict

if TYPE_CHECKING:
    from reviewgate_store.models import LogRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp   TEXT NOT NULL,
    event       TEXT NOT NULL,
    payload     TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_events_event ON events (event);
"""

# Seconds SQLite waits on a locked database before giving up.
_DEFAULT_BUSY_TIMEOUT = 30.0


class SQLiteEventLog(BaseEventLog):
    """Stores events in a local SQLite database file.

    The database path defaults to `.claude/code-review/event-log.db` under
    the project root. Configure via .reviewgate.yml: `store: sqlite` and
    `store_path: /path/to/events.db`.
    """

    def __init__(self, db_path: str | os.PathLike, lock_timeout: float | None = None):
        self._path = Path(db_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        timeout = _DEFAULT_BUSY_TIMEOUT if lock_timeout is None else lock_timeout
        # isolation_level=None: we issue BEGIN/COMMIT ourselves in locked().
        self._conn = sqlite3.connect(str(self._path), timeout=timeout, isolation_level=None)
        self._conn.executescript(_SCHEMA)
        self._in_transaction = False

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def locked(self) -> Iterator[None]:
        if self._in_transaction:
            yield
            return

        try:
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise EventLogUnavailable(f"Could not lock {self._path}: {e}") from e
        self._in_transaction = True
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        finally:
            self._in_transaction = False
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise EventLogUnavailable(f"Could not commit to {self._path}: {e}") from e

    def append(self, record: LogRecord) -> AppendResult:
        payload = to_dict(record)
        try:
            with self.locked():
                self._conn.execute(
                    "INSERT INTO events (timestamp, event, payload) VALUES (?, ?, ?)",
                    (record.timestamp, record.event, json.dumps(payload, ensure_ascii=False)),
                )
        except (sqlite3.Error, EventLogUnavailable) as e:
            logger.warning("SQLiteEventLog.append() failed (%s): %s", type(e).__name__, e)
            return AppendResult.failure(e)
        return AppendResult.success()

    def _iter_records(self) -> Iterator[LogRecord]:
        try:
            rows = self._conn.execute("SELECT payload FROM events ORDER BY id").fetchall()
        except sqlite3.Error as e:
            raise EventLogUnavailable(f"Could not read {self._path}: {e}") from e
        for (payload,) in rows:
            try:
                data = json.loads(payload)
            except json.JSONDecodeError:
                logger.debug("Skipping malformed event row: %.80s", payload)
                continue
            record = from_dict(data) if isinstance(data, dict) else None
            if record is not None:
                yield record

    def close(self) -> None:
        self._conn.close()
