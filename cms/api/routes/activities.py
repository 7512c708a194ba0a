from fastapi import APIRouter, Depends

from cms.adapters.sqlite.repos import SQLiteActivityRepo
from cms.api.deps import get_activity_repo, get_rules, require_admin
from cms.api.schemas import ActivityResponse
from cms.components.activity import RecentActivityInput, run_recent
from cms.domain.entities import Identity
from cms.rules.models import Rules

router = APIRouter()


@router.get("", response_model=list[ActivityResponse])
def recent_activities(
    _admin: Identity = Depends(require_admin),
    repo: SQLiteActivityRepo = Depends(get_activity_repo),
    rules: Rules = Depends(get_rules),
) -> list[ActivityResponse]:
    """Most recent activity, newest first."""
    result = run_recent(RecentActivityInput(limit=rules.activity.recent_limit), repo=repo)
    return [ActivityResponse.from_record(r) for r in result.records]
