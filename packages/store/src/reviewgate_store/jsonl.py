"""JsonlEventLog — the default, plain-text event log.

Why JSON Lines:
- Append-only by construction: each event is one `write()` of one line,
  nothing already on disk is ever rewritten.
- Human-greppable: `tail .claude/code-review/event-log.jsonl` shows exactly
  what the hooks saw.
- Tolerant reads: a torn or hand-edited line only loses that line; the scan
  skips it and carries on.

Concurrent hook processes serialize their appends through an flock on the
sibling `<log>.lock` file (see reviewgate_store.locking).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from reviewgate_store.base import BaseEventLog, EventLogUnavailable
from reviewgate_store.locking import exclusive_lock
from reviewgate_store.models import AppendResult, decode_line, encode_line

if TYPE_CHECKING:
    from reviewgate_store.models import LogRecord

logger = logging.getLogger(__name__)


class JsonlEventLog(BaseEventLog):
    """Stores events as one JSON object per line in a local file.

    The lock is re-entrant within one instance: append() inside locked()
    reuses the lock already held instead of deadlocking on a second flock.
    """

    def __init__(self, path: str | os.PathLike, lock_timeout: float | None = None):
        self._path = Path(path)
        self._lock_path = self._path.with_name(self._path.name + ".lock")
        self._lock_timeout = lock_timeout
        self._lock_depth = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock_path(self) -> Path:
        return self._lock_path

    @contextmanager
    def locked(self) -> Iterator[None]:
        if self._lock_depth:
            self._lock_depth += 1
            try:
                yield
            finally:
                self._lock_depth -= 1
            return

        with ExitStack() as stack:
            try:
                stack.enter_context(exclusive_lock(self._lock_path, timeout=self._lock_timeout))
            except OSError as e:
                raise EventLogUnavailable(f"Could not lock {self._lock_path}: {e}") from e
            self._lock_depth = 1
            try:
                yield
            finally:
                self._lock_depth = 0

    def append(self, record: LogRecord) -> AppendResult:
        """Append one record under the lock, creating the log if needed."""
        try:
            line = encode_line(record)
            with self.locked():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(self._path, "a", encoding="utf-8") as f:
                    f.write(line)
        except Exception as e:
            # Never let a logging failure escape into the hook that observed the edit.
            logger.warning("JsonlEventLog.append() failed (%s): %s", type(e).__name__, e)
            return AppendResult.failure(e)
        return AppendResult.success()

    def _iter_records(self) -> Iterator[LogRecord]:
        try:
            f = open(self._path, encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return
        except OSError as e:
            raise EventLogUnavailable(f"Could not read {self._path}: {e}") from e
        with f:
            for line in f:
                record = decode_line(line)
                if record is not None:
                    yield record
