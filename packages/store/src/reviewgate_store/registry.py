"""InitRegistry — file-backed idempotency table for first-run initialization.

Settings initialization happens lazily inside whichever hook runs first. Two
hooks of the same session can fire almost at once, so "has this project been
initialized for this session?" is recorded in a small JSON set guarded by
one cross-process lock, and the initializer itself runs while that lock is
held. A second claimant therefore waits, then sees the key and skips.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from reviewgate_store.locking import exclusive_lock

logger = logging.getLogger(__name__)


def default_registry_path() -> Path:
    # One directory per user: another user's lock and registry files are not writable.
    return Path(tempfile.gettempdir()) / f"reviewgate-{os.getuid()}" / "init-registry.json"


def registry_key(project_root: str | os.PathLike, session_id: str) -> str:
    return f"{Path(project_root).resolve()}::{session_id}"


class InitRegistry:
    """Persisted set of initialized ``<project>::<session>`` keys."""

    def __init__(self, path: str | os.PathLike | None = None, lock_timeout: float | None = None):
        self._path = Path(path) if path is not None else default_registry_path()
        self._lock_path = self._path.with_name(self._path.name + ".lock")
        self._lock_timeout = lock_timeout

    @property
    def path(self) -> Path:
        return self._path

    def contains(self, key: str) -> bool:
        return key in self._read()

    def claim(self, key: str, initializer: Callable[[], None]) -> bool:
        """Run ``initializer`` once per key, across processes.

        Returns True if this call ran the initializer, False if the key was
        already claimed. The key is only recorded when the initializer
        returns normally; an exception propagates and leaves the key free.
        """
        with exclusive_lock(self._lock_path, timeout=self._lock_timeout):
            keys = self._read()
            if key in keys:
                return False
            initializer()
            keys.add(key)
            self._write(keys)
            return True

    def _read(self) -> set[str]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return set()
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.debug("Ignoring unreadable init registry %s: %s", self._path, e)
            return set()
        if not isinstance(data, list):
            return set()
        return {k for k in data if isinstance(k, str)}

    def _write(self, keys: set[str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(sorted(keys), indent=2), encoding="utf-8")
        os.replace(tmp, self._path)
