"""
Scheduler component - Promotes scheduled content once its time has come.
"""

from .component import SWEEP_ACTOR, run_sweep
from .models import SweepFailure, SweepInput, SweepOutput
from .ports import ActivityRepoPort, ContentRepoPort, TimePort

__all__ = [
    "run_sweep",
    "SWEEP_ACTOR",
    "SweepFailure",
    "SweepInput",
    "SweepOutput",
    "ActivityRepoPort",
    "ContentRepoPort",
    "TimePort",
]
