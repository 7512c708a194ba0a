"""
Scheduler component - Promotes scheduled content once its time has come.

Invariants:
- I1: An item is published at most once; the status is re-checked in the write
- I2: Exactly one activity record per item this sweep promoted
- I3: One failing item never stops the rest of the batch
- I4: Items are never published before scheduled_at
"""

from __future__ import annotations

import logging

from cms.components.activity import LogActivityInput, run_log
from cms.components.lifecycle import KIND_LABELS, is_due

from .models import SweepFailure, SweepInput, SweepOutput
from .ports import ActivityRepoPort, ContentRepoPort, TimePort

logger = logging.getLogger(__name__)

SWEEP_ACTOR = "system"


def run_sweep(
    inp: SweepInput,
    *,
    repo: ContentRepoPort,
    activity: ActivityRepoPort,
    time: TimePort,
) -> SweepOutput:
    """
    Publish every scheduled item that is due.

    Safe to run concurrently with itself or with manual edits: an item
    that was already published, unscheduled or rescheduled in the meantime
    is left alone and produces no activity record.

    Args:
        inp: Batch limit.
        repo: Content repository port.
        activity: Activity repository port.
        time: Time port.

    Returns:
        SweepOutput with the number published and per-item failures.
    """
    now = time.now_utc()
    published = 0
    failures: list[SweepFailure] = []

    for item in repo.list_due(now, limit=max(1, inp.limit)):
        if not is_due(item, now):
            continue
        try:
            if not repo.publish_if_due(item.id, now):
                logger.debug("Item %s no longer due, skipping", item.id)
                continue
        except Exception as e:
            logger.exception("Failed to publish scheduled %s %s", item.kind, item.id)
            failures.append(SweepFailure(item_id=item.id, message=str(e)))
            continue

        published += 1
        try:
            run_log(
                LogActivityInput(
                    action=f"{KIND_LABELS[item.kind]} published",
                    actor=SWEEP_ACTOR,
                    category=item.kind,
                    detail=f"Published {item.kind}: {item.title}",
                ),
                repo=activity,
                time=time,
            )
        except Exception as e:
            logger.exception("Published %s %s but failed to record activity", item.kind, item.id)
            failures.append(SweepFailure(item_id=item.id, message=f"activity: {e}"))

    if published:
        logger.info("Published %d scheduled item(s)", published)

    return SweepOutput(published=published, failures=failures, success=not failures)
