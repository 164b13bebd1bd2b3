"""log command — PostToolUse hook that records file edits."""

from __future__ import annotations

import click

from reviewgate_cli.context import read_hook_payload, resolve_settings
from reviewgate_core.hook import ToolEvent
from reviewgate_core.tracker import track_tool_use


@click.command("log")
@click.pass_context
def log_cmd(ctx):
    """Record a Write/Edit/MultiEdit of a tracked file.

    Reads the hook payload as JSON on stdin:

    \b
      {"tool_name": "Edit", "session_id": "...", "tool_input": {"file_path": "src/app.py"}}

    Always exits 0: recording an edit must never block the edit itself.
    """
    event = ToolEvent.from_payload(read_hook_payload())
    # No session to attribute the edit to.
    if not event.session_id:
        return

    settings = resolve_settings(ctx, event.session_id)
    track_tool_use(event, settings, ctx.obj["log"])
