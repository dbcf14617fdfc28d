import math
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from src.adapters.clock import SystemClock
from src.adapters.local_storage import LocalImageStore
from src.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from src.api.deps import (
    get_block_validator,
    get_clock,
    get_current_user,
    get_image_store,
    get_optional_user,
    get_policy,
    get_post_repo,
    get_rules,
    get_user_repo,
)
from src.api.errors import raise_for_errors
from src.api.schemas import (
    BookmarkResponse,
    CommentDeleteResponse,
    CommentMutationResponse,
    CommentRequest,
    CommentResponse,
    CommentViewResponse,
    ImageUploadResponse,
    LikeResponse,
    PostDeleteResponse,
    PostListResponse,
    PostResponse,
    PostSummaryResponse,
    PostUpdateRequest,
    ToggleRequest,
)
from src.components import comments, engagement, posts
from src.domain.blocks import BlockValidator
from src.domain.entities import Comment, Post, User
from src.domain.policy import PolicyEngine
from src.rules.models import Rules

router = APIRouter()


def _post_response(post: Post) -> PostResponse:
    return PostResponse.model_validate(post.model_dump())


def _comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse.model_validate(comment, from_attributes=True)


def _uploads(files: list[UploadFile] | None) -> list[posts.ImageUpload]:
    return [
        posts.ImageUpload(
            filename=f.filename or "",
            data=f.file.read(),
            content_type=f.content_type or "",
        )
        for f in files or []
    ]


# --- Posts ---


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    title: Annotated[str, Form()],
    subtitle: Annotated[str | None, Form()] = None,
    blocks: Annotated[str | None, Form()] = None,
    product_links: Annotated[str | None, Form(alias="productLinks")] = None,
    category: Annotated[str | None, Form()] = None,
    images: Annotated[list[UploadFile] | None, File()] = None,
    current_user: User = Depends(get_current_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    storage: LocalImageStore = Depends(get_image_store),
    time: SystemClock = Depends(get_clock),
    validator: BlockValidator = Depends(get_block_validator),
    rules: Rules = Depends(get_rules),
) -> PostResponse:
    """Create a post owned by the requester (multipart form)."""
    inp = posts.CreatePostInput(
        owner_id=current_user.id,
        title=title,
        subtitle=subtitle,
        blocks=blocks,
        product_links=product_links,
        category=category,
        uploads=_uploads(images),
    )
    result = posts.run_create(
        inp,
        repo=repo,
        storage=storage,
        time=time,
        validator=validator,
        rules=rules.posts,
        upload_rules=rules.uploads,
    )
    if not result.success or result.post is None:
        raise_for_errors(result.errors)
    return _post_response(result.post)


@router.post("/upload-image", response_model=ImageUploadResponse)
def upload_editor_image(
    image: Annotated[UploadFile, File()],
    current_user: User = Depends(get_current_user),
    storage: LocalImageStore = Depends(get_image_store),
    rules: Rules = Depends(get_rules),
) -> ImageUploadResponse:
    """Store an image for the block editor and return its url."""
    (upload,) = _uploads([image])
    result = posts.run_upload_image(
        posts.UploadImageInput(upload=upload), storage=storage, rules=rules.uploads
    )
    if not result.success or result.image is None:
        raise_for_errors(result.errors)
    return ImageUploadResponse.model_validate(result.image, from_attributes=True)


@router.get("", response_model=PostListResponse)
def list_posts(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
    category: str | None = None,
    search: str | None = None,
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
) -> PostListResponse:
    """Newest-first page of post summaries."""
    result = posts.run_list(
        posts.ListPostsInput(category=category, search=search, page=page, page_size=limit),
        repo=repo,
        rules=rules.pagination,
    )
    return PostListResponse(
        posts=[PostSummaryResponse.model_validate(s.model_dump()) for s in result.items],
        total=result.total,
        page=result.page,
        limit=result.page_size,
        total_pages=math.ceil(result.total / result.page_size) if result.page_size else 0,
    )


@router.get("/user/{owner_id}", response_model=list[PostResponse])
def list_posts_by_owner(
    owner_id: UUID,
    repo: SQLitePostRepo = Depends(get_post_repo),
) -> list[PostResponse]:
    result = posts.run_list_by_owner(posts.ListOwnerPostsInput(owner_id=owner_id), repo=repo)
    return [_post_response(p) for p in result.posts]


@router.get("/id/{post_id}", response_model=PostResponse)
def get_post_by_id(
    post_id: UUID,
    repo: SQLitePostRepo = Depends(get_post_repo),
) -> PostResponse:
    result = posts.run_get(posts.GetPostInput(post_id=post_id), repo=repo)
    if not result.success or result.post is None:
        raise_for_errors(result.errors)
    return _post_response(result.post)


@router.get("/{slug}", response_model=PostResponse)
def get_post_by_slug(
    slug: str,
    repo: SQLitePostRepo = Depends(get_post_repo),
) -> PostResponse:
    result = posts.run_get(posts.GetPostInput(slug=slug), repo=repo)
    if not result.success or result.post is None:
        raise_for_errors(result.errors)
    return _post_response(result.post)


@router.patch("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: UUID,
    req: PostUpdateRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    time: SystemClock = Depends(get_clock),
    validator: BlockValidator = Depends(get_block_validator),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> PostResponse:
    """Owner-only partial update."""
    inp = posts.UpdatePostInput(
        post_id=post_id,
        requester_id=current_user.id,
        title=req.title,
        subtitle=req.subtitle,
        blocks=req.blocks,
        product_links=req.product_links,
        category=req.category,
    )
    result = posts.run_update(
        inp, repo=repo, time=time, validator=validator, policy=policy, rules=rules.posts
    )
    if not result.success or result.post is None:
        raise_for_errors(result.errors)
    return _post_response(result.post)


@router.delete("/{post_id}", response_model=PostDeleteResponse)
def delete_post(
    post_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    storage: LocalImageStore = Depends(get_image_store),
    policy: PolicyEngine = Depends(get_policy),
) -> PostDeleteResponse:
    """Owner-only delete. Stored images are removed best-effort."""
    result = posts.run_delete(
        posts.DeletePostInput(post_id=post_id, requester_id=current_user.id),
        repo=repo,
        storage=storage,
        policy=policy,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return PostDeleteResponse(deleted=result.deleted, failed_image_ids=result.failed_image_ids)


# --- Engagement ---


def _toggle_target(
    req: ToggleRequest | None, user: User | None, bind_to_requester: bool
) -> UUID:
    target = req.user_id if req else None
    if bind_to_requester and user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if target is None:
        if user is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userId is required")
        target = user.id
    return target


@router.post("/{post_id}/like", response_model=LikeResponse)
def toggle_like(
    post_id: UUID,
    req: ToggleRequest | None = None,
    user: User | None = Depends(get_optional_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> LikeResponse:
    bind = rules.engagement.bind_to_requester
    inp = engagement.ToggleLikeInput(
        post_id=post_id,
        user_id=_toggle_target(req, user, bind),
        requester_id=user.id if user else None,
        bind_to_requester=bind,
    )
    result = engagement.run_toggle_like(inp, repo=repo, policy=policy)
    if not result.success:
        raise_for_errors(result.errors)
    return LikeResponse(liked=result.liked, likes_count=result.likes_count)


@router.post("/{post_id}/bookmark", response_model=BookmarkResponse)
def toggle_bookmark(
    post_id: UUID,
    req: ToggleRequest | None = None,
    user: User | None = Depends(get_optional_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> BookmarkResponse:
    bind = rules.engagement.bind_to_requester
    inp = engagement.ToggleBookmarkInput(
        post_id=post_id,
        user_id=_toggle_target(req, user, bind),
        requester_id=user.id if user else None,
        bind_to_requester=bind,
    )
    result = engagement.run_toggle_bookmark(inp, repo=repo, policy=policy)
    if not result.success:
        raise_for_errors(result.errors)
    return BookmarkResponse(bookmarked=result.bookmarked)


# --- Comments ---


@router.get("/{post_id}/comments", response_model=list[CommentViewResponse])
def list_comments(
    post_id: UUID,
    repo: SQLitePostRepo = Depends(get_post_repo),
    users: SQLiteUserRepo = Depends(get_user_repo),
    rules: Rules = Depends(get_rules),
) -> list[CommentViewResponse]:
    result = comments.run_list(
        comments.ListCommentsInput(post_id=post_id), repo=repo, users=users, rules=rules.comments
    )
    if not result.success:
        raise_for_errors(result.errors)
    return [CommentViewResponse.model_validate(c) for c in result.comments]


@router.post(
    "/{post_id}/comments",
    response_model=CommentMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    post_id: UUID,
    req: CommentRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    time: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> CommentMutationResponse:
    inp = comments.AddCommentInput(
        post_id=post_id,
        author_id=current_user.id,
        author_username=current_user.username,
        text=req.text,
    )
    result = comments.run_add(inp, repo=repo, time=time, rules=rules.comments)
    if not result.success or result.comment is None:
        raise_for_errors(result.errors)
    return CommentMutationResponse(
        comment=_comment_response(result.comment), comments_count=result.comments_count
    )


@router.put("/{post_id}/comments/{comment_id}", response_model=CommentMutationResponse)
def edit_comment(
    post_id: UUID,
    comment_id: UUID,
    req: CommentRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> CommentMutationResponse:
    inp = comments.EditCommentInput(
        post_id=post_id, comment_id=comment_id, requester_id=current_user.id, text=req.text
    )
    result = comments.run_edit(inp, repo=repo, policy=policy, rules=rules.comments)
    if not result.success or result.comment is None:
        raise_for_errors(result.errors)
    return CommentMutationResponse(
        comment=_comment_response(result.comment), comments_count=result.comments_count
    )


@router.delete("/{post_id}/comments/{comment_id}", response_model=CommentDeleteResponse)
def delete_comment(
    post_id: UUID,
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: SQLitePostRepo = Depends(get_post_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> CommentDeleteResponse:
    inp = comments.RemoveCommentInput(
        post_id=post_id, comment_id=comment_id, requester_id=current_user.id
    )
    result = comments.run_remove(inp, repo=repo, policy=policy)
    if not result.success:
        raise_for_errors(result.errors)
    return CommentDeleteResponse(deleted=result.removed, comments_count=result.comments_count)
