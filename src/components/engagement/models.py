"""
Engagement component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.core.entities import PostError

# --- Input Models ---


@dataclass(frozen=True)
class ToggleLikeInput:
    """
    Toggle user_id's like on a post.

    When bind_to_requester is set, user_id must equal requester_id.
    """

    post_id: UUID
    user_id: UUID
    requester_id: UUID | None = None
    bind_to_requester: bool = False


@dataclass(frozen=True)
class ToggleBookmarkInput:
    post_id: UUID
    user_id: UUID
    requester_id: UUID | None = None
    bind_to_requester: bool = False


# --- Output Models ---


@dataclass(frozen=True)
class LikeOutput:
    liked: bool = False
    likes_count: int = 0
    errors: list[PostError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BookmarkOutput:
    bookmarked: bool = False
    errors: list[PostError] = field(default_factory=list)
    success: bool = True
