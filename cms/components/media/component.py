"""
Media component - Keeps stored files consistent with content state.

Composes the attachments component with content persistence across create,
update and delete, including every failure path.

Invariants:
- I1: A successful operation never leaves an item referencing a missing file
- I2: Files staged for a failed request are removed before it returns
- I3: Replaced files are removed only after the new state is saved
- I4: Removing an item's files never fails or undoes the delete itself
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from cms.components.attachments import run_remove
from cms.domain.entities import ContentItem

from .models import MediaPlan
from .ports import FileStorePort

logger = logging.getLogger(__name__)


def plan_replacement(current: dict[str, str], staged: dict[str, str]) -> MediaPlan:
    """Merge newly staged files over the current references."""
    media = dict(current)
    replaced: list[str] = []
    for field_name, key in staged.items():
        old = media.get(field_name)
        if old and old != key:
            replaced.append(old)
        media[field_name] = key
    return MediaPlan(media=media, staged=tuple(staged.values()), replaced=tuple(replaced))


@contextmanager
def guarded(plan: MediaPlan, *, store: FileStorePort) -> Iterator[MediaPlan]:
    """
    Persist inside this block; staged files are discarded if it raises.

    Usage:
        with guarded(plan, store=store):
            repo.save(item)
        run_commit(plan, store=store)
    """
    try:
        yield plan
    except BaseException:
        if plan.staged:
            logger.info("Discarding %d staged file(s) after failed save", len(plan.staged))
            run_discard(plan, store=store)
        raise


def run_discard(plan: MediaPlan, *, store: FileStorePort) -> None:
    """Remove files staged for a request that did not go through."""
    run_remove(plan.staged, store=store)


def run_commit(plan: MediaPlan, *, store: FileStorePort) -> None:
    """Remove files the item no longer references. Call only after a successful save."""
    run_remove(plan.replaced, store=store)


def run_release(item: ContentItem, *, store: FileStorePort) -> int:
    """Remove every file an item owns. Best-effort; returns files removed."""
    return run_remove(item.media.values(), store=store)
