"""
Posts component - Post aggregate lifecycle.

Creates, reads, lists, updates and deletes posts, and stores editor images.

Invariants:
- slug is non-empty and unique; uniqueness is the store's UNIQUE constraint,
  a rejected write is retried once with a freshly suffixed slug
- slug is only recomputed when the title changes
- a failed image upload aborts create, nothing is written
- deletion cascades to every stored image best-effort; failures are logged
  and reported but never block removing the post
"""

from __future__ import annotations

import logging
from datetime import datetime

from src.core.entities import CATEGORIES, ErrorCode, ImageRef, Post, PostError, PostSummary
from src.core.ports.db import MutationRejected, SlugConflictError
from src.core.ports.storage import StorageError
from src.domain.blocks import BlockValidator
from src.domain.policy import PolicyEngine
from src.domain.slug import DEFAULT_FALLBACK, SlugGenerator
from src.domain.uploads import check_upload
from src.rules.models import PaginationRules, PostRules, UploadsRules

from .models import (
    CreatePostInput,
    DeletePostInput,
    DeletePostOutput,
    GetPostInput,
    ImageUpload,
    ListOwnerPostsInput,
    ListPostsInput,
    OwnerPostsOutput,
    PostListOutput,
    PostOutput,
    UpdatePostInput,
    UploadImageInput,
    UploadImageOutput,
)
from .ports import ImageStorePort, PostRepoPort, TimePort

logger = logging.getLogger(__name__)

# --- Default Configuration ---

DEFAULT_TITLE_MAX = 200
DEFAULT_SUBTITLE_MAX = 300
DEFAULT_CATEGORY = "other"
DEFAULT_PAGE_SIZE = 10
DEFAULT_MAX_PAGE_SIZE = 100
DEFAULT_POSTS_FOLDER = "blog/posts"
DEFAULT_EDITOR_FOLDER = "blog/editor-images"


def _error(code: ErrorCode, message: str, field: str | None = None) -> PostError:
    return PostError(code=code, message=message, field=field)


# --- Validation Functions ---


def _validate_title(title: str | None, rules: PostRules | None) -> list[PostError]:
    max_len = rules.title.max if rules else DEFAULT_TITLE_MAX
    if not title or not title.strip():
        return [_error("validation_error", "Title is required", "title")]
    if len(title.strip()) > max_len:
        return [_error("validation_error", f"Title must be at most {max_len} characters", "title")]
    return []


def _validate_subtitle(subtitle: str | None, rules: PostRules | None) -> list[PostError]:
    max_len = rules.subtitle.max if rules else DEFAULT_SUBTITLE_MAX
    if subtitle and len(subtitle.strip()) > max_len:
        return [
            _error("validation_error", f"Subtitle must be at most {max_len} characters", "subtitle")
        ]
    return []


def _clean_subtitle(subtitle: str | None) -> str | None:
    if subtitle is None:
        return None
    return subtitle.strip() or None


def normalize_category(category: str | None, rules: PostRules | None = None) -> str:
    """Empty or unrecognized categories fall back to the default."""
    allowed = rules.categories if rules else list(CATEGORIES)
    default = rules.default_category if rules else DEFAULT_CATEGORY
    value = (category or "").strip().lower()
    return value if value in allowed else default


def _validate_uploads(
    uploads: list[ImageUpload], rules: UploadsRules | None
) -> list[PostError]:
    errors = []
    for upload in uploads:
        message = check_upload(upload.filename, upload.data, rules)
        if message:
            errors.append(_error("validation_error", message, "images"))
    return errors


# --- Storage Helpers ---


def _store_uploads(
    uploads: list[ImageUpload], storage: ImageStorePort, folder: str
) -> list[ImageRef]:
    """
    Store uploads in order. On failure, removes what was already stored
    and re-raises so no post is written with missing images.
    """
    stored: list[ImageRef] = []
    for upload in uploads:
        try:
            image = storage.store(
                upload.data, folder, filename=upload.filename, content_type=upload.content_type
            )
        except StorageError:
            _discard_images(storage, stored)
            raise
        stored.append(ImageRef(url=image.url, storage_id=image.storage_id))
    return stored


def _discard_images(storage: ImageStorePort, images: list[ImageRef]) -> list[str]:
    """
    Delete each image independently. Returns the storage ids that failed.

    Any collaborator failure is recorded per image, including ones outside
    the StorageError contract, so one bad delete never blocks the rest.
    """
    failed: list[str] = []
    for image in images:
        try:
            if not storage.delete(image.storage_id):
                logger.info("Stored image %s was already gone", image.storage_id)
        except StorageError as e:
            logger.warning("Failed to delete stored image %s: %s", image.storage_id, e)
            failed.append(image.storage_id)
        except Exception:
            logger.exception("Unexpected error deleting stored image %s", image.storage_id)
            failed.append(image.storage_id)
    return failed


def _slug_generator(repo: PostRepoPort, rules: PostRules | None) -> SlugGenerator:
    return SlugGenerator(repo.slug_owner, fallback=rules.fallback_slug if rules else DEFAULT_FALLBACK)


def _save_new(post: Post, slugs: SlugGenerator, now: datetime, repo: PostRepoPort) -> Post:
    try:
        return repo.save(post)
    except SlugConflictError as e:
        post.slug = slugs.regenerate(post.title, now, e.slug)
        logger.info("Slug %s was taken concurrently, retrying as %s", e.slug, post.slug)
        return repo.save(post)


# --- Component Entry Points ---


def run_create(
    inp: CreatePostInput,
    *,
    repo: PostRepoPort,
    storage: ImageStorePort,
    time: TimePort,
    validator: BlockValidator | None = None,
    rules: PostRules | None = None,
    upload_rules: UploadsRules | None = None,
) -> PostOutput:
    """
    Create a post owned by inp.owner_id.

    Validation runs before any upload; uploads run before the write.
    """
    validator = validator or BlockValidator(rules)

    errors = _validate_title(inp.title, rules) + _validate_subtitle(inp.subtitle, rules)
    blocks = []
    links = []
    try:
        blocks = validator.validate(inp.blocks)
    except ValueError as e:
        errors.append(_error("validation_error", str(e), "blocks"))
    try:
        links = validator.normalize_product_links(inp.product_links)
    except ValueError as e:
        errors.append(_error("validation_error", str(e), "productLinks"))
    errors.extend(_validate_uploads(inp.uploads, upload_rules))

    if errors:
        return PostOutput(post=None, errors=errors, success=False)

    folder = upload_rules.folders.posts if upload_rules else DEFAULT_POSTS_FOLDER
    try:
        uploaded = _store_uploads(inp.uploads, storage, folder)
    except StorageError as e:
        logger.error("Image upload failed while creating post: %s", e)
        return PostOutput(
            post=None,
            errors=[_error("storage_error", f"Image upload failed: {e}", "images")],
            success=False,
        )

    now = time.now_utc()
    post = Post(
        owner_id=inp.owner_id,
        title=inp.title.strip(),
        subtitle=_clean_subtitle(inp.subtitle),
        blocks=blocks,
        images=[*inp.image_refs, *uploaded],
        product_links=links,
        category=normalize_category(inp.category, rules),  # type: ignore[arg-type]
        created_at=now,
        updated_at=now,
    )
    slugs = _slug_generator(repo, rules)
    post.slug = slugs.generate(post.title, now, post.id)

    try:
        saved = _save_new(post, slugs, now, repo)
    except SlugConflictError as e:
        _discard_images(storage, uploaded)
        return PostOutput(
            post=None,
            errors=[_error("conflict", f"Could not reserve a unique slug ({e.slug})", "slug")],
            success=False,
        )

    logger.info("Created post %s with slug %s", saved.id, saved.slug)
    return PostOutput(post=saved)


def run_get(inp: GetPostInput, *, repo: PostRepoPort) -> PostOutput:
    """Get a post by id or slug."""
    if inp.post_id is not None:
        post = repo.get_by_id(inp.post_id)
    elif inp.slug:
        post = repo.get_by_slug(inp.slug)
    else:
        return PostOutput(
            errors=[_error("validation_error", "Either post_id or slug must be provided")],
            success=False,
        )

    if post is None:
        return PostOutput(errors=[_error("not_found", "Post not found")], success=False)
    return PostOutput(post=post)


def run_list(
    inp: ListPostsInput,
    *,
    repo: PostRepoPort,
    rules: PaginationRules | None = None,
) -> PostListOutput:
    """
    Newest-first page of post summaries.

    Offset pagination without a snapshot: concurrent inserts or deletes can
    shift page boundaries between requests.
    """
    default_size = rules.default_page_size if rules else DEFAULT_PAGE_SIZE
    max_size = rules.max_page_size if rules else DEFAULT_MAX_PAGE_SIZE

    page = max(inp.page, 1)
    page_size = min(max(inp.page_size or default_size, 1), max_size)
    search = (inp.search or "").strip() or None
    category = (inp.category or "").strip().lower() or None

    posts, total = repo.list(
        category=category,
        search=search,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return PostListOutput(
        items=[PostSummary.from_post(p) for p in posts],
        total=total,
        page=page,
        page_size=page_size,
    )


def run_list_by_owner(inp: ListOwnerPostsInput, *, repo: PostRepoPort) -> OwnerPostsOutput:
    return OwnerPostsOutput(posts=repo.list_by_owner(inp.owner_id))


def run_update(
    inp: UpdatePostInput,
    *,
    repo: PostRepoPort,
    time: TimePort,
    validator: BlockValidator | None = None,
    policy: PolicyEngine | None = None,
    rules: PostRules | None = None,
) -> PostOutput:
    """Owner-only partial update."""
    validator = validator or BlockValidator(rules)
    policy = policy or PolicyEngine()

    existing = repo.get_by_id(inp.post_id)
    if existing is None:
        return PostOutput(errors=[_error("not_found", "Post not found")], success=False)
    if not policy.can_modify_post(inp.requester_id, existing):
        return PostOutput(
            errors=[_error("forbidden", "Only the owner can edit this post")], success=False
        )

    errors: list[PostError] = []
    if inp.title is not None:
        errors.extend(_validate_title(inp.title, rules))
    errors.extend(_validate_subtitle(inp.subtitle, rules))
    blocks = None
    links = None
    if inp.blocks is not None:
        try:
            blocks = validator.validate(inp.blocks)
        except ValueError as e:
            errors.append(_error("validation_error", str(e), "blocks"))
    if inp.product_links is not None:
        try:
            links = validator.normalize_product_links(inp.product_links)
        except ValueError as e:
            errors.append(_error("validation_error", str(e), "productLinks"))
    if errors:
        return PostOutput(errors=errors, success=False)

    now = time.now_utc()
    title = inp.title.strip() if inp.title is not None else existing.title
    slugs = _slug_generator(repo, rules)
    slug = existing.slug
    if title != existing.title:
        slug = slugs.generate(title, now, existing.id)

    def apply(post: Post) -> Post:
        if not policy.can_modify_post(inp.requester_id, post):
            raise MutationRejected("forbidden", "Only the owner can edit this post")
        post.title = title
        post.slug = slug
        if inp.subtitle is not None:
            post.subtitle = _clean_subtitle(inp.subtitle)
        if blocks is not None:
            post.blocks = blocks
        if links is not None:
            post.product_links = links
        if inp.category is not None:
            post.category = normalize_category(inp.category, rules)  # type: ignore[assignment]
        post.updated_at = now
        return post

    try:
        try:
            updated = repo.update_atomic(inp.post_id, apply)
        except SlugConflictError as e:
            slug = slugs.regenerate(title, now, e.slug)
            logger.info("Slug %s was taken concurrently, retrying as %s", e.slug, slug)
            updated = repo.update_atomic(inp.post_id, apply)
    except MutationRejected as e:
        return PostOutput(errors=[_error(e.code, e.message)], success=False)
    except SlugConflictError as e:
        return PostOutput(
            errors=[_error("conflict", f"Could not reserve a unique slug ({e.slug})", "slug")],
            success=False,
        )

    if updated is None:
        return PostOutput(errors=[_error("not_found", "Post not found")], success=False)
    return PostOutput(post=updated)


def run_delete(
    inp: DeletePostInput,
    *,
    repo: PostRepoPort,
    storage: ImageStorePort,
    policy: PolicyEngine | None = None,
) -> DeletePostOutput:
    """Owner-only delete, cascading to stored images."""
    policy = policy or PolicyEngine()

    post = repo.get_by_id(inp.post_id)
    if post is None:
        return DeletePostOutput(errors=[_error("not_found", "Post not found")], success=False)
    if not policy.can_modify_post(inp.requester_id, post):
        return DeletePostOutput(
            errors=[_error("forbidden", "Only the owner can delete this post")], success=False
        )

    failed = _discard_images(storage, post.images)
    repo.delete(post.id)

    logger.info(
        "Deleted post %s (%d images, %d failed to delete)", post.id, len(post.images), len(failed)
    )
    return DeletePostOutput(deleted=True, failed_image_ids=failed)


def run_upload_image(
    inp: UploadImageInput,
    *,
    storage: ImageStorePort,
    rules: UploadsRules | None = None,
) -> UploadImageOutput:
    """Store an editor image; the caller embeds the returned url in an image block."""
    message = check_upload(inp.upload.filename, inp.upload.data, rules)
    if message:
        return UploadImageOutput(errors=[_error("validation_error", message, "image")], success=False)

    folder = inp.folder or (rules.folders.editor if rules else DEFAULT_EDITOR_FOLDER)
    try:
        image = storage.store(
            inp.upload.data,
            folder,
            filename=inp.upload.filename,
            content_type=inp.upload.content_type,
        )
    except StorageError as e:
        logger.error("Editor image upload failed: %s", e)
        return UploadImageOutput(
            errors=[_error("storage_error", f"Image upload failed: {e}", "image")], success=False
        )
    return UploadImageOutput(image=image)
