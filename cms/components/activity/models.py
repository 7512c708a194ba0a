"""
Activity component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cms.domain.entities import ActivityCategory, ActivityRecord


@dataclass(frozen=True)
class ActivityValidationError:
    code: str
    message: str


@dataclass(frozen=True)
class LogActivityInput:
    action: str
    actor: str
    category: ActivityCategory
    detail: str = ""


@dataclass(frozen=True)
class RecentActivityInput:
    limit: int = 10


@dataclass(frozen=True)
class LogOutput:
    record: ActivityRecord | None
    errors: list[ActivityValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ActivityListOutput:
    records: list[ActivityRecord]
    errors: list[ActivityValidationError] = field(default_factory=list)
    success: bool = True
