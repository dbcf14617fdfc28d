"""
Engagement component - Likes and bookmarks.

Toggles membership of a user in a post's liked_users / bookmarked_users.

Invariants:
- each toggle is one atomic read-modify-write on the post, so concurrent
  toggles from different users are never lost
- likes_count always equals len(liked_users) after a toggle
- toggling twice restores the original membership
"""

from __future__ import annotations

import logging

from src.core.entities import PostError
from src.domain.policy import PolicyEngine

from .models import BookmarkOutput, LikeOutput, ToggleBookmarkInput, ToggleLikeInput
from .ports import PostRepoPort

logger = logging.getLogger(__name__)

_FORBIDDEN = PostError(code="forbidden", message="Cannot toggle on behalf of another user")
_NOT_FOUND = PostError(code="not_found", message="Post not found")


def run_toggle_like(
    inp: ToggleLikeInput,
    *,
    repo: PostRepoPort,
    policy: PolicyEngine | None = None,
) -> LikeOutput:
    """Flip inp.user_id's like. Returns the new state and count."""
    policy = policy or PolicyEngine()
    if not policy.can_toggle_for(inp.requester_id, inp.user_id, inp.bind_to_requester):
        return LikeOutput(errors=[_FORBIDDEN], success=False)

    result = repo.update_atomic(
        inp.post_id, lambda post: (post.toggle_like(inp.user_id), post.likes_count)
    )
    if result is None:
        return LikeOutput(errors=[_NOT_FOUND], success=False)

    liked, count = result
    logger.debug("User %s %s post %s", inp.user_id, "liked" if liked else "unliked", inp.post_id)
    return LikeOutput(liked=liked, likes_count=count)


def run_toggle_bookmark(
    inp: ToggleBookmarkInput,
    *,
    repo: PostRepoPort,
    policy: PolicyEngine | None = None,
) -> BookmarkOutput:
    policy = policy or PolicyEngine()
    if not policy.can_toggle_for(inp.requester_id, inp.user_id, inp.bind_to_requester):
        return BookmarkOutput(errors=[_FORBIDDEN], success=False)

    bookmarked = repo.update_atomic(inp.post_id, lambda post: post.toggle_bookmark(inp.user_id))
    if bookmarked is None:
        return BookmarkOutput(errors=[_NOT_FOUND], success=False)
    return BookmarkOutput(bookmarked=bookmarked)
