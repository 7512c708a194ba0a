"""
Comments component - Reader comments on blog posts.
"""

from .component import COMMENT_DETAIL_LENGTH, run_add_comment, run_delete_comment
from .models import AddCommentInput, CommentError, CommentOutput, DeleteCommentInput
from .ports import ActivityRepoPort, CommentRepoPort, ContentRepoPort, TimePort

__all__ = [
    "run_add_comment",
    "run_delete_comment",
    "COMMENT_DETAIL_LENGTH",
    "AddCommentInput",
    "DeleteCommentInput",
    "CommentError",
    "CommentOutput",
    "ActivityRepoPort",
    "CommentRepoPort",
    "ContentRepoPort",
    "TimePort",
]
