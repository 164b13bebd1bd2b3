"""Helpers shared by the hook commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from reviewgate_core.settings import Settings


def read_hook_payload() -> dict:
    from reviewgate_core.hook import parse_hook_input

    return parse_hook_input(click.get_text_stream("stdin").read())


def resolve_settings(ctx: click.Context, session_id: str) -> Settings:
    """Load the project's settings, initializing them on first use.

    Prints the one-time initialization notice to stderr so it reaches the
    user without being mistaken for hook output on stdout.
    """
    from reviewgate_core.settings import get_or_initialize_settings
    from reviewgate_store.registry import InitRegistry

    config = ctx.obj["config"]
    paths = ctx.obj["paths"]
    registry = InitRegistry(paths.registry_path, lock_timeout=config.get("lock_timeout"))

    lookup = get_or_initialize_settings(paths, session_id, registry, plugin_root=config.get("plugin_root"))
    if lookup.initialized:
        click.echo("✅ code-review plugin initialized!", err=True)
        click.echo(f"   Updated: {_relative(paths.settings_path, paths.root)}", err=True)
        for created in lookup.created_files:
            click.echo(f"   Created: {_relative(created, paths.root)}", err=True)
        click.echo(f"   Customize {lookup.settings.rules_file} for your project.", err=True)
    return lookup.settings


def _relative(path, root) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)
