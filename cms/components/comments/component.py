"""
Comments component - Reader comments on blog posts.

- run_add_comment: any signed-in user, on a blog post they can read
- run_delete_comment: admin only

Each successful call appends one "comment" activity record whose detail is
the first COMMENT_DETAIL_LENGTH characters of the text.
"""

from __future__ import annotations

import logging
from uuid import UUID

from cms.components.activity import LogActivityInput, run_log
from cms.domain.entities import Comment, ContentItem, Identity

from .models import AddCommentInput, CommentError, CommentOutput, DeleteCommentInput
from .ports import ActivityRepoPort, CommentRepoPort, ContentRepoPort, TimePort

logger = logging.getLogger(__name__)

COMMENT_DETAIL_LENGTH = 50


def _failure(code: str, message: str, field: str | None = None) -> CommentOutput:
    return CommentOutput(
        comment=None, errors=[CommentError(code=code, message=message, field=field)], success=False
    )


def _find_post(repo: ContentRepoPort, item_id: UUID, viewer: Identity) -> ContentItem | None:
    item = repo.get_by_id(item_id)
    if item is None or item.kind != "blog":
        return None
    # Same visibility as a single read
    if item.status != "published" and not viewer.is_admin:
        return None
    return item


def _log(
    activity: ActivityRepoPort,
    time: TimePort,
    *,
    action: str,
    actor: str,
    comment: Comment,
) -> None:
    try:
        run_log(
            LogActivityInput(
                action=action,
                actor=actor,
                category="comment",
                detail=comment.text[:COMMENT_DETAIL_LENGTH],
            ),
            repo=activity,
            time=time,
        )
    except Exception:
        logger.exception("Failed to record activity %r for comment %s", action, comment.id)


def run_add_comment(
    inp: AddCommentInput,
    *,
    repo: ContentRepoPort,
    comments: CommentRepoPort,
    activity: ActivityRepoPort,
    time: TimePort,
) -> CommentOutput:
    """Attach a comment to a blog post."""
    if inp.actor is None:
        return _failure("unauthorized", "Not authorized, no token")

    text = inp.text.strip()
    if not text:
        return _failure("text_required", "Comment text is required", "text")

    item = _find_post(repo, inp.content_id, inp.actor)
    if item is None:
        return _failure("not_found", "Blog post not found")

    comment = Comment(
        user_id=inp.actor.user_id,
        name=inp.actor.name,
        text=text,
        created_at=time.now_utc(),
    )
    if not comments.add_comment(item.id, comment):
        # Deleted between the read and the insert
        return _failure("not_found", "Blog post not found")

    logger.info("Comment %s added to blog %s by %s", comment.id, item.id, inp.actor.user_id)
    _log(activity, time, action="Comment received", actor=inp.actor.name, comment=comment)
    return CommentOutput(comment=comment, errors=[], success=True)


def run_delete_comment(
    inp: DeleteCommentInput,
    *,
    repo: ContentRepoPort,
    comments: CommentRepoPort,
    activity: ActivityRepoPort,
    time: TimePort,
) -> CommentOutput:
    """Remove a comment from a blog post. Admin only."""
    if inp.actor is None:
        return _failure("unauthorized", "Not authorized, no token")
    if not inp.actor.is_admin:
        return _failure("forbidden", "Not authorized, admin access required")

    item = _find_post(repo, inp.content_id, inp.actor)
    if item is None:
        return _failure("not_found", "Blog post not found")

    comment = comments.get_comment(item.id, inp.comment_id)
    if comment is None or not comments.delete_comment(item.id, comment.id):
        return _failure("not_found", "Comment not found")

    _log(activity, time, action="Comment deleted", actor=inp.actor.name, comment=comment)
    return CommentOutput(comment=comment, errors=[], success=True)
