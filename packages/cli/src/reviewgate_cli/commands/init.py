"""init command — explicit project setup.

The hooks initialize a project lazily on first use; `reviewgate init` does
the same ahead of time and lets a team choose which extensions to track
before the first edit is logged.
"""

from __future__ import annotations

import click
from rich.console import Console

from reviewgate_core.rules import install_rules
from reviewgate_core.settings import (
    DEFAULT_FILE_EXTENSIONS,
    Settings,
    initialize_settings,
    load_settings,
    normalize_extensions,
)

console = Console()


@click.command("init")
@click.option(
    "--extension",
    "-e",
    "extensions",
    multiple=True,
    help="File extension to track (repeatable). Defaults to: " + ", ".join(DEFAULT_FILE_EXTENSIONS) + ".",
)
@click.option("--disable", is_flag=True, help="Write the settings with reviews disabled.")
@click.option("--force", is_flag=True, help="Replace an existing codeReview section.")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts.")
@click.pass_context
def init_cmd(ctx, extensions: tuple[str, ...], disable: bool, force: bool, yes: bool):
    """Write codeReview settings and copy the review rule templates."""
    config = ctx.obj["config"]
    paths = ctx.obj["paths"]

    existing = load_settings(paths.settings_path)
    if existing is not None and not force:
        console.print(f"[yellow]{paths.settings_path} already has a codeReview section.[/yellow]")
        console.print("Re-run with [bold]--force[/bold] to replace it.")
        return
    if existing is not None and not yes:
        click.confirm("Replace the existing codeReview settings?", abort=True)

    chosen = normalize_extensions(extensions)
    if extensions and not chosen:
        raise click.BadParameter("no usable extensions given.", param_hint="--extension")

    settings = Settings(enabled=not disable, file_extensions=chosen or DEFAULT_FILE_EXTENSIONS)
    try:
        initialize_settings(paths.settings_path, settings)
    except OSError as e:
        raise click.ClickException(f"Could not write {paths.settings_path}: {e}")
    console.print(f"[green]Wrote codeReview settings to {paths.settings_path}[/green]")
    console.print(f"  Tracking: {', '.join(settings.file_extensions)}", highlight=False)
    if disable:
        console.print("  [yellow]Reviews are disabled.[/yellow] Set codeReview.enabled to true to turn them on.")

    for created in install_rules(paths, settings, plugin_root=config.get("plugin_root")):
        console.print(f"[green]Created {created}[/green]")

    console.print(f"\nCustomize [bold]{settings.rules_file}[/bold] for your project.")
