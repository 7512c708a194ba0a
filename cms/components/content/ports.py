"""
Content component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from cms.components.attachments import AttachmentRule
from cms.domain.entities import ContentKind
from cms.ports.repo import ActivityRepoPort, ContentRepoPort, UserRepoPort

__all__ = [
    "ActivityRepoPort",
    "ContentRepoPort",
    "RulesPort",
    "TimePort",
    "UserRepoPort",
]


class RulesPort(Protocol):
    """Port for content configuration."""

    def get_upload_rules(self, kind: ContentKind) -> dict[str, AttachmentRule]:
        """Per-field upload constraints for a content kind."""
        ...

    def get_max_page_size(self) -> int:
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
