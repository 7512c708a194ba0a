"""
Lifecycle component - Content status state machine.
"""

from .component import (
    KIND_LABELS,
    TRANSITIONS,
    can_transition,
    describe_create,
    describe_delete,
    describe_update,
    is_due,
    run_resolve,
)
from .models import LifecycleError, ResolvedStatus, ResolveStatusInput

__all__ = [
    # Entry points
    "run_resolve",
    "can_transition",
    "is_due",
    "describe_create",
    "describe_delete",
    "describe_update",
    "KIND_LABELS",
    "TRANSITIONS",
    # Models
    "LifecycleError",
    "ResolvedStatus",
    "ResolveStatusInput",
]
