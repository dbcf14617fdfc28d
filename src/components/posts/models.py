"""
Posts component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from src.core.entities import ImageRef, Post, PostError, PostSummary
from src.core.ports.storage import StoredImage

# --- Input Models ---


@dataclass(frozen=True)
class ImageUpload:
    """Raw image bytes received with a request."""

    filename: str
    data: bytes
    content_type: str = ""


@dataclass(frozen=True)
class CreatePostInput:
    """
    Input for creating a post.

    blocks and product_links accept a list or its JSON text form.
    """

    owner_id: UUID
    title: str
    subtitle: str | None = None
    blocks: Any = None
    product_links: Any = None
    category: str | None = None
    image_refs: list[ImageRef] = field(default_factory=list)
    uploads: list[ImageUpload] = field(default_factory=list)


@dataclass(frozen=True)
class UpdatePostInput:
    """Only fields that are not None are changed."""

    post_id: UUID
    requester_id: UUID
    title: str | None = None
    subtitle: str | None = None
    blocks: Any = None
    product_links: Any = None
    category: str | None = None


@dataclass(frozen=True)
class GetPostInput:
    post_id: UUID | None = None
    slug: str | None = None


@dataclass(frozen=True)
class ListPostsInput:
    category: str | None = None
    search: str | None = None
    page: int = 1
    page_size: int | None = None


@dataclass(frozen=True)
class ListOwnerPostsInput:
    owner_id: UUID


@dataclass(frozen=True)
class DeletePostInput:
    post_id: UUID
    requester_id: UUID


@dataclass(frozen=True)
class UploadImageInput:
    upload: ImageUpload
    folder: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class PostOutput:
    post: Post | None = None
    errors: list[PostError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class PostListOutput:
    items: list[PostSummary] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0
    errors: list[PostError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class OwnerPostsOutput:
    posts: list[Post] = field(default_factory=list)
    errors: list[PostError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DeletePostOutput:
    """failed_image_ids lists stored images the cascade could not remove."""

    deleted: bool = False
    failed_image_ids: list[str] = field(default_factory=list)
    errors: list[PostError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class UploadImageOutput:
    image: StoredImage | None = None
    errors: list[PostError] = field(default_factory=list)
    success: bool = True
