"""
Comments component - Embedded comment ledger of a post.

Invariants:
- comments keep insertion (chronological) order
- comments_count == len(comments) after every add/remove, written in the
  same atomic update as the sequence
- only the author may edit or remove a comment; edit replaces text only
- listing never fails because one author lookup fails
"""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

from src.core.entities import Comment, ErrorCode, Post, PostError, User
from src.core.ports.db import MutationRejected
from src.domain.entities import DEFAULT_AVATAR_URL
from src.domain.policy import PolicyEngine
from src.rules.models import CommentRules

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

logger = logging.getLogger(__name__)

# --- Default Configuration ---

DEFAULT_TEXT_MAX = 2000


def _error(code: ErrorCode, message: str, field: str | None = None) -> PostError:
    return PostError(code=code, message=message, field=field)


def validate_text(text: str | None, rules: CommentRules | None = None) -> list[PostError]:
    """Comment text must be non-blank and within the length limit."""
    max_len = rules.text.max if rules else DEFAULT_TEXT_MAX
    if not text or not text.strip():
        return [_error("validation_error", "Comment text is required", "text")]
    if len(text.strip()) > max_len:
        return [_error("validation_error", f"Comment must be at most {max_len} characters", "text")]
    return []


def _lookup_author(users: UserDirectoryPort, author_id: UUID) -> User | None:
    try:
        return users.get_by_id(author_id)
    except Exception as e:
        logger.warning("Author lookup failed for %s: %s", author_id, e)
        return None


def run_list(
    inp: ListCommentsInput,
    *,
    repo: PostRepoPort,
    users: UserDirectoryPort,
    rules: CommentRules | None = None,
) -> CommentListOutput:
    """
    Comments of a post, oldest first, enriched with each author's current
    username and avatar. Unresolved authors fall back to the username
    captured at comment time and the placeholder avatar.
    """
    post = repo.get_by_id(inp.post_id)
    if post is None:
        return CommentListOutput(errors=[_error("not_found", "Post not found")], success=False)

    placeholder = rules.placeholder_avatar_url if rules else DEFAULT_AVATAR_URL
    authors: dict[UUID, User | None] = {}
    views = []
    for comment in post.comments:
        if comment.author_id not in authors:
            authors[comment.author_id] = _lookup_author(users, comment.author_id)
        author = authors[comment.author_id]
        views.append(
            CommentView(
                id=comment.id,
                author_id=comment.author_id,
                username=author.username if author else comment.author_username,
                avatar_url=(author.avatar_url if author else None) or placeholder,
                text=comment.text,
                created_at=comment.created_at,
            )
        )
    return CommentListOutput(comments=views)


def run_add(
    inp: AddCommentInput,
    *,
    repo: PostRepoPort,
    time: TimePort,
    rules: CommentRules | None = None,
) -> CommentOutput:
    errors = validate_text(inp.text, rules)
    if errors:
        return CommentOutput(errors=errors, success=False)

    comment = Comment(
        id=uuid4(),
        author_id=inp.author_id,
        author_username=inp.author_username,
        text=inp.text.strip(),
        created_at=time.now_utc(),
    )

    def apply(post: Post) -> int:
        post.add_comment(comment)
        return post.comments_count

    count = repo.update_atomic(inp.post_id, apply)
    if count is None:
        return CommentOutput(errors=[_error("not_found", "Post not found")], success=False)

    logger.debug("Comment %s added to post %s", comment.id, inp.post_id)
    return CommentOutput(comment=comment, comments_count=count)


def run_edit(
    inp: EditCommentInput,
    *,
    repo: PostRepoPort,
    policy: PolicyEngine | None = None,
    rules: CommentRules | None = None,
) -> CommentOutput:
    """Author-only text replacement. id and created_at never change."""
    policy = policy or PolicyEngine()
    errors = validate_text(inp.text, rules)
    if errors:
        return CommentOutput(errors=errors, success=False)

    def apply(post: Post) -> tuple[Comment, int]:
        comment = post.find_comment(inp.comment_id)
        if comment is None:
            raise MutationRejected("not_found", "Comment not found")
        if not policy.can_modify_comment(inp.requester_id, comment):
            raise MutationRejected("forbidden", "Only the author can edit this comment")
        comment.text = inp.text.strip()
        return comment.model_copy(), post.comments_count

    try:
        result = repo.update_atomic(inp.post_id, apply)
    except MutationRejected as e:
        return CommentOutput(errors=[_error(e.code, e.message)], success=False)

    if result is None:
        return CommentOutput(errors=[_error("not_found", "Post not found")], success=False)
    comment, count = result
    return CommentOutput(comment=comment, comments_count=count)


def run_remove(
    inp: RemoveCommentInput,
    *,
    repo: PostRepoPort,
    policy: PolicyEngine | None = None,
) -> RemoveCommentOutput:
    policy = policy or PolicyEngine()

    def apply(post: Post) -> int:
        comment = post.find_comment(inp.comment_id)
        if comment is None:
            raise MutationRejected("not_found", "Comment not found")
        if not policy.can_modify_comment(inp.requester_id, comment):
            raise MutationRejected("forbidden", "Only the author can delete this comment")
        post.remove_comment(comment.id)
        return post.comments_count

    try:
        count = repo.update_atomic(inp.post_id, apply)
    except MutationRejected as e:
        return RemoveCommentOutput(errors=[_error(e.code, e.message)], success=False)

    if count is None:
        return RemoveCommentOutput(errors=[_error("not_found", "Post not found")], success=False)
    logger.debug("Comment %s removed from post %s", inp.comment_id, inp.post_id)
    return RemoveCommentOutput(removed=True, comments_count=count)
