"""Advisory file locks shared by the JSONL log and the init registry.

flock(2) locks are advisory: they serialize every process that goes through
exclusive_lock() and nothing else. A holder killed mid-append releases the
lock when its file descriptor closes; a holder that hangs blocks everyone
unless a timeout is configured.
"""

from __future__ import annotations

import fcntl
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_POLL_INTERVAL = 0.05


class LockTimeout(TimeoutError):
    """The lock could not be acquired within the configured timeout."""

    def __init__(self, path: Path, timeout: float):
        super().__init__(f"Timed out after {timeout:g}s waiting for lock {path}")
        self.path = path
        self.timeout = timeout


@contextmanager
def exclusive_lock(path: str | os.PathLike, timeout: float | None = None) -> Iterator[None]:
    """Hold an exclusive flock on ``path`` for the duration of the block.

    The lock file (and its directory) is created if missing. Its content is
    never read or written. ``timeout=None`` blocks until the lock is free.
    """
    lock_path = Path(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "a") as handle:
        _acquire(handle, lock_path, timeout)
        try:
            yield
        finally:
            fcntl.flock(handle, fcntl.LOCK_UN)


def _acquire(handle, lock_path: Path, timeout: float | None) -> None:
    if timeout is None:
        fcntl.flock(handle, fcntl.LOCK_EX)
        return

    deadline = time.monotonic() + timeout
    while True:
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
            return
        except BlockingIOError:
            if time.monotonic() >= deadline:
                raise LockTimeout(lock_path, timeout)
            time.sleep(_POLL_INTERVAL)
