"""
Comments component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from src.core.entities import Comment, PostError

# --- View Model ---


@dataclass(frozen=True)
class CommentView:
    """A comment with its author's current display name and avatar."""

    id: UUID
    author_id: UUID
    username: str
    avatar_url: str
    text: str
    created_at: datetime


# --- Input Models ---


@dataclass(frozen=True)
class ListCommentsInput:
    post_id: UUID


@dataclass(frozen=True)
class AddCommentInput:
    post_id: UUID
    author_id: UUID
    author_username: str
    text: str


@dataclass(frozen=True)
class EditCommentInput:
    post_id: UUID
    comment_id: UUID
    requester_id: UUID
    text: str


@dataclass(frozen=True)
class RemoveCommentInput:
    post_id: UUID
    comment_id: UUID
    requester_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class CommentListOutput:
    comments: list[CommentView] = field(default_factory=list)
    errors: list[PostError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class CommentOutput:
    comment: Comment | None = None
    comments_count: int = 0
    errors: list[PostError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RemoveCommentOutput:
    removed: bool = False
    comments_count: int = 0
    errors: list[PostError] = field(default_factory=list)
    success: bool = True
