"""
Activity component - Append-only record of what happened.

Invariants:
- I1: Records are immutable once appended
- I2: Actor identity captured on every record
- I3: Listing is newest first
"""

from __future__ import annotations

from cms.domain.entities import ActivityRecord

from .models import (
    ActivityListOutput,
    ActivityValidationError,
    LogActivityInput,
    LogOutput,
    RecentActivityInput,
)
from .ports import ActivityRepoPort, TimePort

MAX_RECENT = 100


def run_log(
    inp: LogActivityInput,
    *,
    repo: ActivityRepoPort,
    time: TimePort,
) -> LogOutput:
    """Append one activity record."""
    if not inp.action.strip():
        return LogOutput(
            record=None,
            errors=[ActivityValidationError(code="action_required", message="Action is required")],
            success=False,
        )

    record = ActivityRecord(
        action=inp.action.strip(),
        actor=inp.actor.strip() or "system",
        category=inp.category,
        detail=inp.detail,
        created_at=time.now_utc(),
    )
    saved = repo.append(record)
    return LogOutput(record=saved, errors=[], success=True)


def run_recent(
    inp: RecentActivityInput,
    *,
    repo: ActivityRepoPort,
) -> ActivityListOutput:
    """List the most recent activity records."""
    limit = max(1, min(inp.limit, MAX_RECENT))
    return ActivityListOutput(records=repo.recent(limit), errors=[], success=True)
