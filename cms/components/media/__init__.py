"""
Media component - Keeps stored files consistent with content state.
"""

from .component import guarded, plan_replacement, run_commit, run_discard, run_release
from .models import MediaPlan

__all__ = [
    "guarded",
    "plan_replacement",
    "run_commit",
    "run_discard",
    "run_release",
    "MediaPlan",
]
