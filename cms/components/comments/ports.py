"""
Comments component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from cms.ports.repo import ActivityRepoPort, CommentRepoPort, ContentRepoPort

__all__ = ["ActivityRepoPort", "CommentRepoPort", "ContentRepoPort", "TimePort"]


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
