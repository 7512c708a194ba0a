"""
Scheduler component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from cms.ports.repo import ActivityRepoPort, ContentRepoPort

__all__ = ["ActivityRepoPort", "ContentRepoPort", "TimePort"]


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
