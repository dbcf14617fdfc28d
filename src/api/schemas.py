from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities import Category

# --- Users / Auth ---


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    avatar_url: str
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# --- Images ---


class ImageRefModel(BaseModel):
    url: str
    storage_id: str


class ImageUploadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    url: str
    storage_id: str


# --- Posts ---


class ProductLinkModel(BaseModel):
    name: str
    url: str


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    author_id: UUID
    author_username: str
    text: str
    created_at: datetime


class PostResponse(BaseModel):
    id: UUID
    owner_id: UUID
    title: str
    subtitle: str | None = None
    slug: str
    blocks: list[dict[str, Any]] = []
    images: list[ImageRefModel] = []
    product_links: list[ProductLinkModel] = []
    liked_users: list[UUID] = []
    likes_count: int = 0
    bookmarked_users: list[UUID] = []
    comments: list[CommentResponse] = []
    comments_count: int = 0
    category: Category
    created_at: datetime
    updated_at: datetime


class PostSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    title: str
    subtitle: str | None = None
    slug: str
    images: list[ImageRefModel] = []
    category: Category
    likes_count: int
    comments_count: int
    created_at: datetime


class PostListResponse(BaseModel):
    posts: list[PostSummaryResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class PostUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    subtitle: str | None = None
    blocks: list[dict[str, Any]] | None = None
    product_links: list[dict[str, Any]] | None = Field(default=None, alias="productLinks")
    category: str | None = None


class PostDeleteResponse(BaseModel):
    deleted: bool
    failed_image_ids: list[str] = []


# --- Engagement ---


class ToggleRequest(BaseModel):
    """Target user of a like/bookmark toggle. Defaults to the requester."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID | None = Field(default=None, alias="userId")


class LikeResponse(BaseModel):
    liked: bool
    likes_count: int


class BookmarkResponse(BaseModel):
    bookmarked: bool


# --- Comments ---


class CommentRequest(BaseModel):
    text: str


class CommentViewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    author_id: UUID
    username: str
    avatar_url: str
    text: str
    created_at: datetime


class CommentMutationResponse(BaseModel):
    comment: CommentResponse
    comments_count: int


class CommentDeleteResponse(BaseModel):
    deleted: bool
    comments_count: int
