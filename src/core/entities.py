"""
Shared entities and result types for the blog components.

Domain entities live in src.domain.entities and are re-exported here so
components depend on src.core only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from src.domain.entities import (
    CATEGORIES,
    Category,
    Comment,
    ContentBlock,
    ImageRef,
    Post,
    PostSummary,
    ProductLink,
    User,
)

__all__ = [
    "CATEGORIES",
    "Category",
    "Comment",
    "ContentBlock",
    "ErrorCode",
    "ImageRef",
    "Post",
    "PostError",
    "PostSummary",
    "ProductLink",
    "User",
]

ErrorCode = Literal["validation_error", "not_found", "forbidden", "storage_error", "conflict"]


@dataclass(frozen=True)
class PostError:
    """Expected failure reported by a component operation."""

    code: ErrorCode
    message: str
    field: str | None = None
