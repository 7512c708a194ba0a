"""
Activity component - Append-only record of what happened.
"""

from .component import run_log, run_recent
from .models import (
    ActivityListOutput,
    ActivityValidationError,
    LogActivityInput,
    LogOutput,
    RecentActivityInput,
)
from .ports import ActivityRepoPort, TimePort

__all__ = [
    "run_log",
    "run_recent",
    "ActivityListOutput",
    "ActivityValidationError",
    "LogActivityInput",
    "LogOutput",
    "RecentActivityInput",
    "ActivityRepoPort",
    "TimePort",
]
