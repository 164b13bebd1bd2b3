"""stats command — aggregate edit patterns across the event log."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewgate_core.trigger import modification_stats
from reviewgate_store.base import EventLogUnavailable

console = Console()


@click.command("stats")
@click.option("--top", default=10, show_default=True, help="Number of top files to show.")
@click.pass_context
def stats_cmd(ctx, top: int):
    """Show aggregated edit statistics for this project.

    Reports how many edits and reviews were recorded, which files are edited
    most often, and which tools made the edits.
    """
    try:
        stats = modification_stats(ctx.obj["log"])
    except EventLogUnavailable as e:
        raise click.ClickException(str(e))

    if not stats.total_modifications and not stats.total_reviews:
        console.print("[yellow]No events recorded for this project.[/yellow]")
        return

    # --- Summary ---
    console.print("\n[bold]Edit stats[/bold]")
    console.print(f"  Recorded edits:    {stats.total_modifications}")
    console.print(f"  Reviews requested: {stats.total_reviews}")
    console.print(f"  Pending files:     {len(stats.pending)}")
    if stats.total_reviews:
        console.print(f"  Edits per review:  {stats.total_modifications / stats.total_reviews:.1f}")

    # --- Most edited files ---
    if stats.by_file:
        file_table = Table(title=f"Top {top} Most Edited Files", show_header=True)
        file_table.add_column("File")
        file_table.add_column("Edits", justify="right")
        for file_path, count in stats.by_file.most_common(top):
            file_table.add_row(file_path, str(count))
        console.print(file_table)

    # --- Tool breakdown ---
    if stats.by_tool:
        tool_table = Table(title="Edits by Tool", show_header=True)
        tool_table.add_column("Tool", style="bold")
        tool_table.add_column("Edits", justify="right")
        tool_table.add_column("% of total", justify="right")
        for tool, count in stats.by_tool.most_common():
            pct = f"{count / stats.total_modifications * 100:.1f}%"
            tool_table.add_row(tool, str(count), pct)
        console.print(tool_table)
