from datetime import UTC, datetime
from typing import Annotated, Any, Literal
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)

# --- Enums / Literals ---
Category = Literal["tech", "fashion", "food", "lifestyle", "beauty", "travel", "other"]
BlockType = Literal["paragraph", "header", "image"]
UserStatus = Literal["active", "disabled"]

CATEGORIES: tuple[str, ...] = ("tech", "fashion", "food", "lifestyle", "beauty", "travel", "other")
BLOCK_TYPES: tuple[str, ...] = ("paragraph", "header", "image")

DEFAULT_AVATAR_URL = (
    "https://cdn.pixabay.com/photo/2015/10/05/22/37/blank-profile-picture-973460_1280.png"
)


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Users ---


class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    username: str
    email: str
    password_hash: str
    avatar_url: str = DEFAULT_AVATAR_URL
    avatar_storage_id: str | None = None
    status: UserStatus = "active"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Content blocks ---
# Payloads are loose: known keys are named for readers, nothing beyond the
# data object itself is required, and unknown keys are kept as-is. Dumps
# carry only the keys that were supplied so stored content round-trips.


class BlockData(BaseModel):
    model_config = ConfigDict(extra="allow")

    @model_serializer(mode="wrap")
    def _supplied_keys_only(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        dumped = handler(self)
        supplied = self.model_fields_set | set(self.model_extra or {})
        return {k: v for k, v in dumped.items() if k in supplied}


class ParagraphData(BlockData):
    text: Any = None


class HeaderData(BlockData):
    text: Any = None
    level: Any = None


class ImageData(BlockData):
    file: Any = None
    url: Any = None
    caption: Any = None

    def image_url(self) -> str | None:
        if isinstance(self.file, dict) and self.file.get("url"):
            return str(self.file["url"])
        return str(self.url) if self.url else None


class ParagraphBlock(BaseModel):
    id: str
    type: Literal["paragraph"] = "paragraph"
    data: ParagraphData


class HeaderBlock(BaseModel):
    id: str
    type: Literal["header"] = "header"
    data: HeaderData


class ImageBlock(BaseModel):
    id: str
    type: Literal["image"] = "image"
    data: ImageData


ContentBlock = Annotated[ParagraphBlock | HeaderBlock | ImageBlock, Field(discriminator="type")]


# --- Post aggregate ---


class ImageRef(BaseModel):
    url: str
    storage_id: str


class ProductLink(BaseModel):
    name: str
    url: str


class Comment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    author_id: UUID
    author_username: str
    text: str
    created_at: datetime = Field(default_factory=utcnow)


class Post(BaseModel):
    """
    Root aggregate. Comments, likes and bookmarks have no identity outside it.

    Invariants:
    - likes_count == len(liked_users)
    - comments_count == len(comments)
    Every mutation below keeps both in step with the collection it touches.
    """

    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    title: str
    subtitle: str | None = None
    slug: str = ""
    blocks: list[ContentBlock] = Field(default_factory=list)
    images: list[ImageRef] = Field(default_factory=list)
    product_links: list[ProductLink] = Field(default_factory=list)
    liked_users: list[UUID] = Field(default_factory=list)
    likes_count: int = 0
    bookmarked_users: list[UUID] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    comments_count: int = 0
    category: Category = "other"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def toggle_like(self, user_id: UUID) -> bool:
        """Flip membership in liked_users. Returns True when the user now likes the post."""
        if user_id in self.liked_users:
            self.liked_users.remove(user_id)
            liked = False
        else:
            self.liked_users.append(user_id)
            liked = True
        self.likes_count = len(self.liked_users)
        return liked

    def toggle_bookmark(self, user_id: UUID) -> bool:
        if user_id in self.bookmarked_users:
            self.bookmarked_users.remove(user_id)
            return False
        self.bookmarked_users.append(user_id)
        return True

    def find_comment(self, comment_id: UUID) -> Comment | None:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None

    def add_comment(self, comment: Comment) -> None:
        self.comments.append(comment)
        self.comments_count = len(self.comments)

    def remove_comment(self, comment_id: UUID) -> None:
        self.comments = [c for c in self.comments if c.id != comment_id]
        self.comments_count = len(self.comments)

    def document(self) -> dict[str, Any]:
        """Embedded sub-documents persisted alongside the scalar columns."""
        return self.model_dump(
            mode="json",
            include={
                "blocks",
                "images",
                "product_links",
                "liked_users",
                "bookmarked_users",
                "comments",
            },
        )


class PostSummary(BaseModel):
    """List projection of a Post."""

    id: UUID
    owner_id: UUID
    title: str
    subtitle: str | None = None
    slug: str
    images: list[ImageRef] = Field(default_factory=list)
    category: Category
    likes_count: int
    comments_count: int
    created_at: datetime

    @classmethod
    def from_post(cls, post: Post) -> "PostSummary":
        return cls(
            id=post.id,
            owner_id=post.owner_id,
            title=post.title,
            subtitle=post.subtitle,
            slug=post.slug,
            images=list(post.images),
            category=post.category,
            likes_count=post.likes_count,
            comments_count=post.comments_count,
            created_at=post.created_at,
        )
