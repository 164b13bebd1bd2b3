"""Review rule templates copied into a project on first run.

The reviewer agent reads its rules from files inside the project so teams
can edit them in place. On initialization the default rules document and
one document per configured language are copied from the plugin install
(CLAUDE_PLUGIN_ROOT) when it ships them, otherwise from the templates bundled
with this package. Existing files are never overwritten.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewgate_core.config import ProjectPaths
    from reviewgate_core.settings import Settings

logger = logging.getLogger(__name__)

BUILTIN_RULES_DIR = Path(__file__).parent / "rules"
_BUILTIN_DEFAULT = BUILTIN_RULES_DIR / "rules.md"
_BUILTIN_LANGUAGES = BUILTIN_RULES_DIR / "languages"


def _default_source(plugin_root: str | None) -> Path | None:
    if plugin_root:
        candidate = Path(plugin_root).expanduser() / "rules.md"
        if candidate.is_file():
            return candidate
    return _BUILTIN_DEFAULT if _BUILTIN_DEFAULT.is_file() else None


def _language_source(language: str, plugin_root: str | None) -> Path | None:
    if plugin_root:
        candidate = Path(plugin_root).expanduser() / "rules" / f"{language}.md"
        if candidate.is_file():
            return candidate
    builtin = _BUILTIN_LANGUAGES / f"{language}.md"
    return builtin if builtin.is_file() else None


def _resolve(root: Path, value: str) -> Path:
    p = Path(value).expanduser()
    return p if p.is_absolute() else root / p


def _copy_if_missing(source: Path | None, target: Path) -> bool:
    if source is None or target.exists():
        return False
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
    except OSError as e:
        logger.warning("Could not copy rules template %s to %s: %s", source, target, e)
        return False
    return True


def install_rules(paths: ProjectPaths, settings: Settings, plugin_root: str | None = None) -> list[Path]:
    """Copy the default and per-language rules into the project.

    Best-effort: a template that is missing or cannot be copied is skipped.
    Returns the files that were created.
    """
    created: list[Path] = []

    target = _resolve(paths.root, settings.rules_file)
    if _copy_if_missing(_default_source(plugin_root), target):
        created.append(target)

    for language, rules_path in settings.language_specific_rules.items():
        target = _resolve(paths.root, rules_path)
        if _copy_if_missing(_language_source(language, plugin_root), target):
            created.append(target)

    return created
