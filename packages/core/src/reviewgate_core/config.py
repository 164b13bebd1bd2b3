import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "store": "jsonl",  # "jsonl" | "sqlite"
    "log_path": ".claude/code-review/event-log.jsonl",
    "store_path": ".claude/code-review/event-log.db",  # only used by store: sqlite
    "settings_path": ".claude/settings.json",
    "registry_path": None,  # None = <tempdir>/reviewgate-<uid>/init-registry.json
    "lock_timeout": None,  # None = wait for the lock indefinitely
    "project_root": None,  # None = git toplevel, falling back to cwd
}

STORE_TYPES = ("jsonl", "sqlite")


class ConfigError(ValueError):
    """The reviewgate config file exists but is not usable."""


@dataclass(frozen=True)
class ProjectPaths:
    """Absolute locations of every file reviewgate touches in one project."""

    root: Path
    log_path: Path
    store_path: Path
    settings_path: Path
    registry_path: Optional[Path]


def detect_project_root(cwd: Optional[str] = None) -> Path:
    """Return the enclosing git work tree, or the working directory outside git."""
    base = Path(cwd) if cwd else Path.cwd()
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=base,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return base
    toplevel = result.stdout.strip()
    if result.returncode != 0 or not toplevel:
        return base
    return Path(toplevel)


def load_config(config_path: str = ".reviewgate.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewgate.yml in the current directory
      3. CLI argument overrides
    """
    config = default_config()

    path = Path(config_path)
    if path.exists():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Could not read {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(file_config).__name__}.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if config["store"] not in STORE_TYPES:
        raise ConfigError(f"Unknown store {config['store']!r}. Choose one of: {', '.join(STORE_TYPES)}.")

    timeout = config.get("lock_timeout")
    if timeout is not None:
        try:
            config["lock_timeout"] = float(timeout)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"lock_timeout must be a number of seconds, got {timeout!r}.") from e

    return config


def default_config() -> dict:
    """Built-in defaults plus the environment, ignoring any config file."""
    config = dict(DEFAULT_CONFIG)
    # Location of the installed plugin, used to find rule templates.
    config["plugin_root"] = os.environ.get("CLAUDE_PLUGIN_ROOT")
    return config


def resolve_paths(config: dict) -> ProjectPaths:
    """Anchor every configured path at the project root."""
    root = Path(config["project_root"]) if config.get("project_root") else detect_project_root()
    root = root.expanduser().resolve()

    def _anchor(value) -> Path:
        p = Path(value).expanduser()
        return p if p.is_absolute() else root / p

    registry = config.get("registry_path")
    return ProjectPaths(
        root=root,
        log_path=_anchor(config["log_path"]),
        store_path=_anchor(config["store_path"]),
        settings_path=_anchor(config["settings_path"]),
        registry_path=_anchor(registry) if registry else None,
    )
