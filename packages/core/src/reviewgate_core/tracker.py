"""Event logger: turns PostToolUse notifications into FileModified records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reviewgate_core.utils.files import is_mutating_tool, matches_extension
from reviewgate_store.models import FileModified, utc_now

if TYPE_CHECKING:
    from reviewgate_core.hook import ToolEvent
    from reviewgate_core.settings import Settings
    from reviewgate_store.base import BaseEventLog
    from reviewgate_store.models import AppendResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackOutcome:
    """Whether an event was recorded, and if not, why."""

    recorded: bool
    reason: str
    result: AppendResult | None = None


def track_tool_use(event: ToolEvent, settings: Settings, log: BaseEventLog) -> TrackOutcome:
    """Append a FileModified record if the event qualifies.

    Never raises: an append failure is returned in the outcome and logged,
    because a logging failure must not block the edit being observed.
    """
    if not settings.enabled:
        return TrackOutcome(recorded=False, reason="disabled")
    if not is_mutating_tool(event.tool_name):
        return TrackOutcome(recorded=False, reason="untracked tool")
    if not event.file_path:
        return TrackOutcome(recorded=False, reason="no file path")
    if not matches_extension(event.file_path, settings.file_extensions):
        return TrackOutcome(recorded=False, reason="extension not tracked")

    result = log.append(FileModified(file=event.file_path, tool=event.tool_name, timestamp=utc_now()))
    if not result.ok:
        logger.warning("Could not record edit of %s: %s", event.file_path, result.error)
        return TrackOutcome(recorded=False, reason="append failed", result=result)

    logger.debug("Recorded %s of %s", event.tool_name, event.file_path)
    return TrackOutcome(recorded=True, reason="recorded", result=result)
