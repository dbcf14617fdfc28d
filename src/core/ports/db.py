"""
Repository interfaces.

Implementations: SQLite (src.adapters.sqlite.repos), in-memory fakes in tests.

Invariants:
- posts.slug is unique; save() raises SlugConflictError when violated
- users.username and users.email are unique; save() raises UserConflictError
- update_atomic() applies the mutation and persists counts together with
  the collection they summarize, in one write
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar
from uuid import UUID

from src.core.entities import ErrorCode, Post, User

T = TypeVar("T")


class SlugConflictError(Exception):
    """Raised when a write is rejected by the unique slug constraint."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Slug already taken: {slug}")


class UserConflictError(Exception):
    """Raised when a user write is rejected by the unique username or email constraint."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field.capitalize()} already registered")


class MutationRejected(Exception):
    """Raised inside an atomic mutation to abort it without writing."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class PostRepoPort(Protocol):
    def save(self, post: Post) -> Post:
        """Insert or replace a post. Raises SlugConflictError."""
        ...

    def get_by_id(self, post_id: UUID) -> Post | None: ...

    def get_by_slug(self, slug: str) -> Post | None: ...

    def slug_owner(self, slug: str) -> UUID | None:
        """Id of the post owning slug, or None."""
        ...

    def list(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Post], int]:
        """Newest first. Returns (page, total matching)."""
        ...

    def list_by_owner(self, owner_id: UUID) -> list[Post]: ...

    def delete(self, post_id: UUID) -> bool: ...

    def update_atomic(self, post_id: UUID, mutate: Callable[[Post], T]) -> T | None:
        """
        Read, mutate and write one post as a single transaction.

        Returns None if the post does not exist. MutationRejected raised by
        `mutate` rolls back and propagates.
        """
        ...


class UserRepoPort(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def get_by_username(self, username: str) -> User | None: ...

    def save(self, user: User) -> User:
        """Insert or update a user. Raises UserConflictError."""
        ...
