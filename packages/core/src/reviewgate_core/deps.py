"""Startup check for runtime capabilities the hooks cannot work without."""

from __future__ import annotations

import importlib.util
from dataclasses import dataclass


@dataclass(frozen=True)
class MissingDependency:
    name: str
    remediation: str


def _available(module: str) -> bool:
    return importlib.util.find_spec(module) is not None


def missing_dependencies(store: str = "jsonl") -> list[MissingDependency]:
    """Return every dependency the configured setup needs but cannot import."""
    missing = []
    if not _available("fcntl"):
        missing.append(
            MissingDependency(
                name="fcntl",
                remediation="reviewgate needs POSIX advisory file locks. Run it on Linux or macOS, or under WSL on Windows.",
            )
        )
    if store == "sqlite" and not _available("sqlite3"):
        missing.append(
            MissingDependency(
                name="sqlite3",
                remediation="This Python was built without sqlite3. Install a build with SQLite support or set 'store: jsonl'.",
            )
        )
    return missing
