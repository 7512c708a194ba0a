"""
Content component - Blog post and podcast episode operations.
"""

from .component import (
    NOT_FOUND_MESSAGES,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from .models import (
    ContentListOutput,
    ContentOperationOutput,
    ContentValidationError,
    CreateContentInput,
    DeleteContentInput,
    GetContentInput,
    ListContentInput,
    UpdateContentInput,
)
from .ports import ActivityRepoPort, ContentRepoPort, RulesPort, TimePort, UserRepoPort

__all__ = [
    "NOT_FOUND_MESSAGES",
    # Entry points
    "run_create",
    "run_update",
    "run_delete",
    "run_get",
    "run_list",
    # Input models
    "CreateContentInput",
    "UpdateContentInput",
    "DeleteContentInput",
    "GetContentInput",
    "ListContentInput",
    # Output models
    "ContentOperationOutput",
    "ContentListOutput",
    "ContentValidationError",
    # Ports
    "ActivityRepoPort",
    "ContentRepoPort",
    "RulesPort",
    "TimePort",
    "UserRepoPort",
]
