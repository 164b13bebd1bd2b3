"""Per-project settings stored under `codeReview` in .claude/settings.json.

The settings file is shared with the host and other plugins, so reviewgate
only ever owns the `codeReview` object: existing settings are returned
verbatim, and first-run initialization merges the default object into
whatever else the file already holds.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewgate_core.config import ProjectPaths
    from reviewgate_store.registry import InitRegistry

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "codeReview"

DEFAULT_FILE_EXTENSIONS = ("py", "js", "ts", "md", "sh")
DEFAULT_RULES_FILE = ".claude/code-review/rules.md"
DEFAULT_LANGUAGE_RULES = {
    "python": ".claude/code-review/rules/python.md",
    "javascript": ".claude/code-review/rules/javascript.md",
    "typescript": ".claude/code-review/rules/typescript.md",
    "shell": ".claude/code-review/rules/shell.md",
}


def normalize_extensions(values) -> tuple[str, ...]:
    """Strip leading dots and whitespace, drop blanks and duplicates, keep order."""
    seen: dict[str, None] = {}
    for value in values or ():
        if not isinstance(value, str):
            continue
        ext = value.strip().lstrip(".")
        if ext:
            seen.setdefault(ext, None)
    return tuple(seen)


@dataclass(frozen=True)
class Settings:
    enabled: bool = True
    file_extensions: tuple[str, ...] = DEFAULT_FILE_EXTENSIONS
    rules_file: str = DEFAULT_RULES_FILE
    language_specific_rules: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LANGUAGE_RULES))

    @classmethod
    def from_dict(cls, d: dict) -> Settings:
        """Read a `codeReview` object.

        `enabled` defaults to true. A section without `fileExtensions` tracks
        no files at all rather than silently picking up the default list.
        """
        enabled = d.get("enabled", True)
        extensions = d.get("fileExtensions")
        language_rules = d.get("languageSpecificRules")
        rules_file = d.get("rulesFile")
        return cls(
            enabled=enabled if isinstance(enabled, bool) else True,
            file_extensions=normalize_extensions(extensions) if isinstance(extensions, list) else (),
            rules_file=rules_file if isinstance(rules_file, str) and rules_file else DEFAULT_RULES_FILE,
            language_specific_rules=(
                {k: v for k, v in language_rules.items() if isinstance(k, str) and isinstance(v, str)}
                if isinstance(language_rules, dict)
                else {}
            ),
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "fileExtensions": list(self.file_extensions),
            "rulesFile": self.rules_file,
            "languageSpecificRules": dict(self.language_specific_rules),
        }


def _read_document(path: Path) -> dict | None:
    """Parse the settings file. None if it is missing or not a JSON object."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring unparseable settings file %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def load_settings(path: str | os.PathLike) -> Settings | None:
    """Return the project's settings, or None if there is no usable `codeReview` section."""
    document = _read_document(Path(path))
    if document is None:
        return None
    section = document.get(SETTINGS_SECTION)
    if not isinstance(section, dict):
        return None
    return Settings.from_dict(section)


def initialize_settings(path: str | os.PathLike, settings: Settings | None = None) -> Settings:
    """Write ``settings`` (default: built-in defaults) into the `codeReview` section.

    Other top-level keys in the file are preserved. A file that exists but
    cannot be parsed is moved aside to `<name>.bak` before being replaced.
    """
    path = Path(path)
    settings = settings or Settings()

    document = _read_document(path)
    if document is None:
        document = {}
        if path.exists():
            backup = path.with_name(path.name + ".bak")
            shutil.copyfile(path, backup)
            logger.warning("Replaced unparseable %s; previous content saved to %s", path, backup)

    document[SETTINGS_SECTION] = settings.to_dict()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    return settings


@dataclass
class SettingsLookup:
    """Effective settings plus what the lookup had to do to produce them."""

    settings: Settings
    initialized: bool = False
    created_files: list[Path] = field(default_factory=list)


def get_or_initialize_settings(
    paths: ProjectPaths,
    session_id: str,
    registry: InitRegistry,
    plugin_root: str | None = None,
) -> SettingsLookup:
    """Return the project's settings, creating the default configuration on first use.

    Initialization runs at most once per project and session, under the
    registry's cross-process lock. If another process got there first the
    file is re-read; if it is still unusable the defaults are used in memory
    without writing anything.
    """
    from reviewgate_core.rules import install_rules
    from reviewgate_store.registry import registry_key

    existing = load_settings(paths.settings_path)
    if existing is not None:
        return SettingsLookup(settings=existing)

    lookup = SettingsLookup(settings=Settings())

    def _initialize() -> None:
        # Re-check under the lock: a hook from another session may have just written it.
        current = load_settings(paths.settings_path)
        if current is not None:
            lookup.settings = current
            return
        lookup.settings = initialize_settings(paths.settings_path)
        lookup.initialized = True
        lookup.created_files = install_rules(paths, lookup.settings, plugin_root=plugin_root)

    try:
        claimed = registry.claim(registry_key(paths.root, session_id), _initialize)
    except OSError as e:
        logger.warning("Could not initialize %s: %s", paths.settings_path, e)
        return lookup

    if not claimed:
        lookup.settings = load_settings(paths.settings_path) or Settings()
    return lookup
