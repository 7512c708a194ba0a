"""
Activity component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from cms.domain.entities import ActivityRecord


class ActivityRepoPort(Protocol):
    """Append-only store for activity records."""

    def append(self, record: ActivityRecord) -> ActivityRecord:
        ...

    def recent(self, limit: int = 10) -> list[ActivityRecord]:
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
