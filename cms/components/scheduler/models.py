"""
Scheduler component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class SweepInput:
    """Input for one publish sweep."""

    limit: int = 100


@dataclass(frozen=True)
class SweepFailure:
    """One item the sweep could not promote."""

    item_id: UUID
    message: str


@dataclass(frozen=True)
class SweepOutput:
    """
    Result of a sweep.

    published counts only items whose status this sweep actually changed.
    """

    published: int = 0
    failures: list[SweepFailure] = field(default_factory=list)
    success: bool = True
