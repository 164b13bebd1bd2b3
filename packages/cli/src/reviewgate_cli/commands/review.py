"""review command — Stop hook that requires a review of recently edited files."""

from __future__ import annotations

import logging

import click

from reviewgate_cli.context import read_hook_payload, resolve_settings
from reviewgate_core.hook import json_get
from reviewgate_core.prompt import build_review_instructions, format_file_list
from reviewgate_core.trigger import trigger_review
from reviewgate_store.base import EventLogUnavailable

logger = logging.getLogger(__name__)

REVIEW_REQUIRED_EXIT = 2


@click.command("review")
@click.pass_context
def review_cmd(ctx):
    """Block with review instructions if files changed since the last review.

    Reads {"session_id": "..."} on stdin. When files are pending, records a
    review marker, writes the instructions to stderr and the file list to
    stdout, and exits 2. Otherwise exits 0 silently.
    """
    session_id = json_get(read_hook_payload(), "session_id")
    if not session_id:
        return

    settings = resolve_settings(ctx, session_id)
    if not settings.enabled:
        return

    try:
        request = trigger_review(ctx.obj["log"])
    except EventLogUnavailable as e:
        logger.warning("Skipping review check: %s", e)
        return

    if request is None:
        return

    click.echo(build_review_instructions(request.files, settings), err=True)
    click.echo(format_file_list(request.files))
    ctx.exit(REVIEW_REQUIRED_EXIT)
