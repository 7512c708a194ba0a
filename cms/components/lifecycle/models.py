"""
Lifecycle component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from cms.domain.entities import ContentStatus

# --- Validation Error ---


@dataclass(frozen=True)
class LifecycleError:
    """Rejected status transition."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class ResolveStatusInput:
    """
    Requested status change for one item.

    current_status/current_scheduled_at are None for a new item.
    requested_* are None when the request does not mention them.
    """

    current_status: ContentStatus | None
    current_scheduled_at: datetime | None
    requested_status: ContentStatus | None
    requested_scheduled_at: datetime | None
    now_utc: datetime


# --- Output Models ---


@dataclass(frozen=True)
class ResolvedStatus:
    """Status and schedule to persist, or the errors that forbid them."""

    status: ContentStatus | None = None
    scheduled_at: datetime | None = None
    errors: list[LifecycleError] = field(default_factory=list)
    success: bool = True
