"""Review-trigger query: which files changed since the last review?

The log is partitioned by ReviewTriggered markers. Files named by
FileModified records after the most recent marker are "pending"; requesting
a review appends a new marker naming them, which empties the pending set
until the next edit.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from reviewgate_store.models import FileModified, ReviewTriggered, is_marker

if TYPE_CHECKING:
    from reviewgate_store.base import BaseEventLog
    from reviewgate_store.models import AppendResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewRequest:
    """Pending files for which a review marker was just appended."""

    files: list[str]
    marker_result: AppendResult


@dataclass
class ModificationStats:
    total_modifications: int = 0
    total_reviews: int = 0
    pending: list[str] = field(default_factory=list)
    by_file: Counter[str] = field(default_factory=Counter)
    by_tool: Counter[str] = field(default_factory=Counter)


def pending_files(log: BaseEventLog) -> list[str]:
    """Deduplicated, sorted files modified after the last review marker."""
    return sorted({r.file for r in log.scan_since(is_marker) if isinstance(r, FileModified)})


def trigger_review(log: BaseEventLog) -> ReviewRequest | None:
    """Mark the pending files as sent for review.

    Returns None when nothing is pending, in which case no marker is written.
    The scan and the marker append share one hold of the log lock, so an edit
    recorded concurrently lands either before the marker (and is included) or
    after it (and stays pending).
    """
    with log.locked():
        files = pending_files(log)
        if not files:
            return None
        result = log.append(ReviewTriggered(files=tuple(files)))

    if not result.ok:
        # The review still goes ahead; these files will simply be listed again next time.
        logger.warning("Could not record review marker: %s", result.error)
    return ReviewRequest(files=files, marker_result=result)


def review_history(log: BaseEventLog) -> list[ReviewTriggered]:
    """Every review marker in append order."""
    return [r for r in log.records() if isinstance(r, ReviewTriggered)]


def modification_stats(log: BaseEventLog) -> ModificationStats:
    stats = ModificationStats()
    for record in log.records():
        if isinstance(record, ReviewTriggered):
            stats.total_reviews += 1
            continue
        stats.total_modifications += 1
        stats.by_file[record.file] += 1
        stats.by_tool[record.tool or "unknown"] += 1
    stats.pending = pending_files(log)
    return stats
