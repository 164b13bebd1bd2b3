"""history command — display past review requests from the event log."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewgate_core.trigger import review_history
from reviewgate_store.base import EventLogUnavailable

console = Console()


@click.command("history")
@click.option("--limit", default=20, show_default=True, help="Maximum number of reviews to show.")
@click.pass_context
def history_cmd(ctx, limit: int):
    """Show past review requests for this project, most recent first."""
    try:
        markers = review_history(ctx.obj["log"])
    except EventLogUnavailable as e:
        raise click.ClickException(str(e))

    if not markers:
        console.print("[yellow]No reviews have been requested yet.[/yellow]")
        return

    total = len(markers)
    # Show most recent first, capped at --limit.
    markers = list(reversed(markers))[:limit]

    table = Table(title="Review History", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", width=5)
    table.add_column("Requested At", width=20)
    table.add_column("Files", justify="right", width=6)
    table.add_column("Paths", max_width=60)

    for offset, marker in enumerate(markers):
        shown = ", ".join(marker.files[:3])
        if len(marker.files) > 3:
            shown += f", … (+{len(marker.files) - 3})"
        table.add_row(
            str(total - offset),
            marker.timestamp.replace("T", " ").rstrip("Z"),
            str(len(marker.files)),
            shown,
        )

    console.print(table)
