"""
Comments component - Embedded comment ledger of a post.
"""

from .component import run_add, run_edit, run_list, run_remove, validate_text
from .models import (
    AddCommentInput,
    CommentListOutput,
    CommentOutput,
    CommentView,
    EditCommentInput,
    ListCommentsInput,
    RemoveCommentInput,
    RemoveCommentOutput,
)
from .ports import PostRepoPort, TimePort, UserDirectoryPort

__all__ = [
    # Entry points
    "run_add",
    "run_edit",
    "run_list",
    "run_remove",
    "validate_text",
    # Input models
    "AddCommentInput",
    "EditCommentInput",
    "ListCommentsInput",
    "RemoveCommentInput",
    # Output models
    "CommentListOutput",
    "CommentOutput",
    "CommentView",
    "RemoveCommentOutput",
    # Ports
    "PostRepoPort",
    "TimePort",
    "UserDirectoryPort",
]
