"""
Lifecycle component - Content status state machine.

State machine:
- (new) -> draft (default)
- (new)|draft|published -> scheduled (scheduled_at strictly in the future)
- any -> published (manual; clears scheduled_at)
- any -> draft (clears scheduled_at)
- scheduled -> published (sweep only, once scheduled_at <= now)

Guards:
- G1: setting "scheduled" requires a scheduled_at strictly after now
- G2: scheduled_at is None whenever status != "scheduled"
- G3: the sweep never publishes before scheduled_at
"""

from __future__ import annotations

from datetime import UTC, datetime

from cms.domain.entities import ContentItem, ContentKind, ContentStatus

from .models import LifecycleError, ResolvedStatus, ResolveStatusInput

# None stands for "new item"
TRANSITIONS: dict[ContentStatus | None, tuple[ContentStatus, ...]] = {
    None: ("draft", "scheduled", "published"),
    "draft": ("draft", "scheduled", "published"),
    "published": ("published", "scheduled", "draft"),
    "scheduled": ("scheduled", "published", "draft"),
}

KIND_LABELS: dict[ContentKind, str] = {
    "blog": "Blog post",
    "podcast": "Podcast episode",
}


def _utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt


def can_transition(current: ContentStatus | None, target: ContentStatus) -> bool:
    return target in TRANSITIONS.get(current, ())


def run_resolve(inp: ResolveStatusInput) -> ResolvedStatus:
    """
    Decide the status and scheduled_at a create/update may persist.

    An unchanged "scheduled" item keeps its stored date without re-checking
    it; the future-date guard applies whenever a schedule is being set.
    """
    target: ContentStatus = inp.requested_status or inp.current_status or "draft"

    if not can_transition(inp.current_status, target):
        return ResolvedStatus(
            errors=[
                LifecycleError(
                    code="invalid_transition",
                    message=f"Cannot move from {inp.current_status} to {target}",
                    field="status",
                )
            ],
            success=False,
        )

    if target != "scheduled":
        return ResolvedStatus(status=target, scheduled_at=None)

    scheduled_at = inp.requested_scheduled_at or inp.current_scheduled_at
    if scheduled_at is None:
        return ResolvedStatus(
            errors=[
                LifecycleError(
                    code="schedule_required",
                    message="Schedule date is required for scheduled posts",
                    field="scheduled_at",
                )
            ],
            success=False,
        )

    setting_schedule = (
        inp.current_status != "scheduled" or inp.requested_scheduled_at is not None
    )
    if setting_schedule and _utc(scheduled_at) <= _utc(inp.now_utc):
        return ResolvedStatus(
            errors=[
                LifecycleError(
                    code="schedule_past",
                    message="Schedule date must be in the future",
                    field="scheduled_at",
                )
            ],
            success=False,
        )

    return ResolvedStatus(status="scheduled", scheduled_at=scheduled_at)


def is_due(item: ContentItem, now_utc: datetime) -> bool:
    """True if the sweep may promote this item (G3)."""
    return (
        item.status == "scheduled"
        and item.scheduled_at is not None
        and _utc(item.scheduled_at) <= _utc(now_utc)
    )


# --- Activity wording ---


def describe_create(kind: ContentKind, status: ContentStatus) -> str:
    verb = {"published": "published", "scheduled": "scheduled"}.get(status, "created")
    return f"{KIND_LABELS[kind]} {verb}"


def describe_update(
    kind: ContentKind,
    before: ContentStatus,
    after: ContentStatus,
    rescheduled: bool = False,
) -> str:
    if after == "published" and before != "published":
        verb = "published"
    elif after == "scheduled" and (before != "scheduled" or rescheduled):
        verb = "scheduled"
    else:
        verb = "updated"
    return f"{KIND_LABELS[kind]} {verb}"


def describe_delete(kind: ContentKind) -> str:
    return f"{KIND_LABELS[kind]} deleted"
