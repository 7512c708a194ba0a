"""
Blog post comment routes, mounted under /api/blogs.
"""

import logging

from fastapi import APIRouter, Depends

from cms.adapters.clock import SystemClock
from cms.adapters.sqlite.repos import SQLiteActivityRepo, SQLiteContentRepo
from cms.api.deps import get_activity_repo, get_clock, get_content_repo, get_current_identity
from cms.api.errors import parse_uuid, raise_for
from cms.api.schemas import CommentCreateRequest, CommentResponse, DeleteResponse
from cms.components.comments import (
    AddCommentInput,
    DeleteCommentInput,
    run_add_comment,
    run_delete_comment,
)
from cms.domain.entities import Identity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{item_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(
    item_id: str,
    body: CommentCreateRequest,
    actor: Identity = Depends(get_current_identity),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    activity: SQLiteActivityRepo = Depends(get_activity_repo),
    time: SystemClock = Depends(get_clock),
) -> CommentResponse:
    """Comment on a published blog post. Any signed-in user."""
    content_id = parse_uuid(item_id, "Blog post not found")
    result = run_add_comment(
        AddCommentInput(content_id=content_id, text=body.text, actor=actor),
        repo=repo,
        comments=repo,
        activity=activity,
        time=time,
    )
    if not result.success or not result.comment:
        raise_for(result.errors)
    return CommentResponse.from_comment(result.comment)


@router.delete("/{item_id}/comments/{comment_id}", response_model=DeleteResponse)
def delete_comment(
    item_id: str,
    comment_id: str,
    actor: Identity = Depends(get_current_identity),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    activity: SQLiteActivityRepo = Depends(get_activity_repo),
    time: SystemClock = Depends(get_clock),
) -> DeleteResponse:
    """Remove a comment. Admin only."""
    result = run_delete_comment(
        DeleteCommentInput(
            content_id=parse_uuid(item_id, "Blog post not found"),
            comment_id=parse_uuid(comment_id, "Comment not found"),
            actor=actor,
        ),
        repo=repo,
        comments=repo,
        activity=activity,
        time=time,
    )
    if not result.success or not result.comment:
        raise_for(result.errors)
    logger.info("Comment %s removed from blog %s by %s", result.comment.id, item_id, actor.user_id)
    return DeleteResponse(id=result.comment.id, message="Comment removed")
