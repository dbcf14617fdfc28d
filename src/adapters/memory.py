"""In-memory adapters.

Implement PostRepoPort, UserRepoPort and ImageStorePort for tests, seed
scripts and single-process development. Posts are deep-copied in and out
so callers never share state with the store.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TypeVar
from uuid import UUID, uuid4

from src.core.ports.db import SlugConflictError, UserConflictError
from src.core.ports.storage import KeyNotFoundError, StorageError, StoredImage
from src.domain.entities import Post, User

T = TypeVar("T")


class InMemoryPostRepo:
    def __init__(self) -> None:
        self._posts: dict[UUID, Post] = {}
        self._lock = threading.RLock()

    def _check_slug(self, post: Post) -> None:
        for other in self._posts.values():
            if other.slug == post.slug and other.id != post.id:
                raise SlugConflictError(post.slug)

    def save(self, post: Post) -> Post:
        with self._lock:
            self._check_slug(post)
            self._posts[post.id] = post.model_copy(deep=True)
            return post

    def get_by_id(self, post_id: UUID) -> Post | None:
        with self._lock:
            post = self._posts.get(post_id)
            return post.model_copy(deep=True) if post else None

    def get_by_slug(self, slug: str) -> Post | None:
        with self._lock:
            for post in self._posts.values():
                if post.slug == slug:
                    return post.model_copy(deep=True)
            return None

    def slug_owner(self, slug: str) -> UUID | None:
        with self._lock:
            for post in self._posts.values():
                if post.slug == slug:
                    return post.id
            return None

    def _newest_first(self, posts: list[Post]) -> list[Post]:
        return sorted(posts, key=lambda p: (p.created_at, str(p.id)), reverse=True)

    def list(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Post], int]:
        with self._lock:
            matches = [
                p
                for p in self._posts.values()
                if (not category or p.category == category)
                and (not search or search.casefold() in p.title.casefold())
            ]
            ordered = self._newest_first(matches)
            page = ordered[offset : offset + limit]
            return [p.model_copy(deep=True) for p in page], len(matches)

    def list_by_owner(self, owner_id: UUID) -> list[Post]:
        with self._lock:
            owned = [p for p in self._posts.values() if p.owner_id == owner_id]
            return [p.model_copy(deep=True) for p in self._newest_first(owned)]

    def delete(self, post_id: UUID) -> bool:
        with self._lock:
            return self._posts.pop(post_id, None) is not None

    def update_atomic(self, post_id: UUID, mutate: Callable[[Post], T]) -> T | None:
        with self._lock:
            current = self._posts.get(post_id)
            if current is None:
                return None
            working = current.model_copy(deep=True)
            result = mutate(working)
            self._check_slug(working)
            self._posts[post_id] = working
            return result

    def clear(self) -> None:
        """Clear all posts - useful for testing."""
        with self._lock:
            self._posts.clear()


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email.lower() == email.lower():
                return user
        return None

    def get_by_username(self, username: str) -> User | None:
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    def save(self, user: User) -> User:
        for other in self._users.values():
            if other.id == user.id:
                continue
            if other.username == user.username:
                raise UserConflictError("username")
            if other.email.lower() == user.email.lower():
                raise UserConflictError("email")
        self._users[user.id] = user
        return user


class InMemoryImageStore:
    """
    Image store keeping bytes in a dict.

    fail_on_store / fail_on_delete hold storage ids (or "*") that raise
    StorageError, to exercise failure paths.
    """

    def __init__(self, public_base_url: str = "/media") -> None:
        self.public_base_url = public_base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail_on_store = False
        self.fail_on_delete: set[str] = set()
        self.deleted: list[str] = []

    def store(
        self, data: bytes, folder: str, filename: str = "", content_type: str = ""
    ) -> StoredImage:
        if self.fail_on_store:
            raise StorageError("Object store unavailable")
        storage_id = f"{folder.strip('/')}/{uuid4().hex}"
        self.objects[storage_id] = (data, content_type or "application/octet-stream")
        return StoredImage(url=f"{self.public_base_url}/{storage_id}", storage_id=storage_id)

    def delete(self, storage_id: str) -> bool:
        if storage_id in self.fail_on_delete or "*" in self.fail_on_delete:
            raise StorageError(f"Failed to delete {storage_id}")
        if self.objects.pop(storage_id, None) is None:
            return False
        self.deleted.append(storage_id)
        return True

    def get(self, storage_id: str) -> tuple[bytes, str]:
        if storage_id not in self.objects:
            raise KeyNotFoundError(storage_id)
        return self.objects[storage_id]
