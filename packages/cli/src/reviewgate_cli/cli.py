"""CLI entry point for reviewgate.

Commands:
  log      — PostToolUse hook: record an edit in the project event log
  review   — Stop hook: block with review instructions when files changed
  status   — show files modified since the last review, without marking them
  history  — list past review requests
  stats    — aggregate edit counts per file and per tool
  init     — write the default codeReview settings and rule templates

Exit statuses: 0 success or no-op, 1 usage error or missing dependency,
2 review required (review only).
"""

from __future__ import annotations

import logging
import sys

import click

from reviewgate_cli.commands.history import history_cmd
from reviewgate_cli.commands.init import init_cmd
from reviewgate_cli.commands.log import log_cmd
from reviewgate_cli.commands.review import review_cmd
from reviewgate_cli.commands.stats import stats_cmd
from reviewgate_cli.commands.status import status_cmd

logger = logging.getLogger(__name__)


class _ReviewGateGroup(click.Group):
    """Group whose unknown-command error exits 1, matching the hook contract."""

    def resolve_command(self, ctx: click.Context, args: list[str]):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[%(levelname)s] %(name)s: %(message)s",
            stream=sys.stderr,
        )
        logger.debug("Debug logging enabled")
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format="[%(levelname)s] %(message)s",
            stream=sys.stderr,
        )


def _build_log(config: dict, paths):
    """Instantiate the configured event log backend.

    Backend selection:
      store: jsonl  → JsonlEventLog  (log_path, default)
      store: sqlite → SQLiteEventLog (store_path)

    A SQLite database that cannot be opened falls back to the JSONL log so
    the hooks keep recording edits.
    """
    from reviewgate_store.jsonl import JsonlEventLog

    timeout = config.get("lock_timeout")

    if config.get("store") == "sqlite":
        import sqlite3

        from reviewgate_store.sqlite import SQLiteEventLog

        try:
            return SQLiteEventLog(paths.store_path, lock_timeout=timeout)
        except (OSError, sqlite3.Error) as e:
            logger.warning("Could not open SQLite event log %s (%s). Falling back to %s.", paths.store_path, e, paths.log_path)

    return JsonlEventLog(paths.log_path, lock_timeout=timeout)


@click.group(cls=_ReviewGateGroup, invoke_without_command=True)
@click.version_option(package_name="reviewgate", prog_name="reviewgate")
@click.option(
    "--config",
    "config_path",
    default=".reviewgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVIEWGATE_CONFIG",
)
@click.option("--debug", is_flag=True, envvar="REVIEWGATE_DEBUG", help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, debug: bool):
    """Track file edits and require a code review before the agent stops."""
    from reviewgate_core.config import ConfigError, default_config, load_config, resolve_paths
    from reviewgate_core.deps import missing_dependencies

    _configure_logging(debug)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_usage(), err=True)
        ctx.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.warning("%s Using default configuration.", e)
        config = default_config()

    missing = missing_dependencies(config["store"])
    if missing:
        for dep in missing:
            click.echo(f"ERROR: {dep.name} is required but not available.", err=True)
            click.echo(dep.remediation, err=True)
        ctx.exit(1)

    ctx.ensure_object(dict)
    paths = resolve_paths(config)
    log = _build_log(config, paths)
    ctx.obj["config"] = config
    ctx.obj["paths"] = paths
    ctx.obj["log"] = log
    ctx.call_on_close(log.close)


main.add_command(log_cmd)
main.add_command(review_cmd)
main.add_command(status_cmd)
main.add_command(history_cmd)
main.add_command(stats_cmd)
main.add_command(init_cmd)
