"""status command — show pending files without requesting a review."""

from __future__ import annotations

import json

import click
from rich.console import Console

from reviewgate_core.trigger import pending_files
from reviewgate_store.base import EventLogUnavailable

console = Console()


@click.command("status")
@click.option("--json", "as_json", is_flag=True, help="Print the pending files as a JSON array.")
@click.pass_context
def status_cmd(ctx, as_json: bool):
    """Show files modified since the last review.

    Read-only: unlike `review`, this never writes a review marker.
    """
    try:
        files = pending_files(ctx.obj["log"])
    except EventLogUnavailable as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(files))
        return

    if not files:
        console.print("[green]No files modified since the last review.[/green]")
        return

    console.print(f"[bold]{len(files)} file(s) modified since the last review:[/bold]")
    for f in files:
        console.print(f"  - {f}", highlight=False)
