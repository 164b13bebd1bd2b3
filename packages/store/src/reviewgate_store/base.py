"""Abstract event log interface.

Every backend (JSON Lines file, SQLite) implements this interface. The hooks
depend on BaseEventLog — not on a concrete backend — so backends are
swappable without touching the event logger or the review trigger.

Only two primitives matter to callers: append() and scan_since(). The
"find the last marker, then collect what follows" pass is implemented once
here, on top of the backend's ordered record iterator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewgate_store.models import AppendResult, LogRecord


class EventLogUnavailable(Exception):
    """The log exists but cannot be locked or read.

    A missing log is not an error — it is simply empty.
    """


class BaseEventLog(ABC):
    """Append-only, ordered log of LogRecords.

    Implementations must never raise from append() — a failed write is
    reported through the returned AppendResult so the hook that triggered it
    can carry on. Reads tolerate a missing log (empty) and skip records that
    cannot be decoded.
    """

    @abstractmethod
    def append(self, record: LogRecord) -> AppendResult:
        """Persist ``record`` after every record already in the log."""

    @abstractmethod
    def _iter_records(self) -> Iterator[LogRecord]:
        """Yield every decodable record in append order."""

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the backend's write lock across several operations.

        append() called inside the block must not try to re-acquire it.
        Default is a no-op for backends with no shared state.
        """
        yield

    def records(self) -> list[LogRecord]:
        """Return all records in append order. Empty if the log does not exist."""
        return list(self._iter_records())

    def scan_since(self, is_marker: Callable[[LogRecord], bool]) -> list[LogRecord]:
        """Return the records strictly after the last record matching ``is_marker``.

        If no record matches, every record is returned.
        """
        tail: list[LogRecord] = []
        for record in self._iter_records():
            if is_marker(record):
                tail = []
            else:
                tail.append(record)
        return tail

    def close(self) -> None:
        """Release any resources held by the log (connections, file handles).

        Optional — subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
