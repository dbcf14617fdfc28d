"""
Slug derivation for posts.

The timestamp suffix only makes collisions unlikely. Uniqueness itself is
enforced by the UNIQUE constraint on posts.slug; callers retry once with
a fresh suffix when the store rejects a write.
"""

import re
import unicodedata
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

DEFAULT_FALLBACK = "post"

# Returns the id of the post owning the slug, or None when it is free.
SlugLookup = Callable[[str], UUID | None]


def slugify(text: str) -> str:
    """Lowercase, ASCII-fold and hyphenate text into [a-z0-9-]."""
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = folded.lower().strip()
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def with_suffix(base: str, now: datetime) -> str:
    return f"{base}-{int(now.timestamp() * 1000)}"


class SlugGenerator:
    def __init__(self, lookup: SlugLookup, fallback: str = DEFAULT_FALLBACK):
        self.lookup = lookup
        self.fallback = fallback

    def base(self, title: str) -> str:
        return slugify(title) or self.fallback

    def generate(self, title: str, now: datetime, post_id: UUID | None = None) -> str:
        """
        Derive a slug for title. A slug already owned by post_id is not a
        collision, so regenerating for an unchanged title is a no-op.
        """
        candidate = self.base(title)
        owner = self.lookup(candidate)
        if owner is not None and owner != post_id:
            candidate = with_suffix(candidate, now)
        return candidate

    def regenerate(self, title: str, now: datetime, rejected: str) -> str:
        """Fresh candidate after the store rejected `rejected` as a duplicate."""
        candidate = with_suffix(self.base(title), now)
        if candidate == rejected:
            # Same millisecond as the losing attempt
            candidate = f"{candidate}-1"
        return candidate
