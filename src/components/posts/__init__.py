"""
Posts component - Post aggregate lifecycle, slugs and image cascade.
"""

from .component import (
    normalize_category,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_list_by_owner,
    run_update,
    run_upload_image,
)
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

__all__ = [
    # Entry points
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_list_by_owner",
    "run_update",
    "run_upload_image",
    "normalize_category",
    # Input models
    "CreatePostInput",
    "DeletePostInput",
    "GetPostInput",
    "ImageUpload",
    "ListOwnerPostsInput",
    "ListPostsInput",
    "UpdatePostInput",
    "UploadImageInput",
    # Output models
    "DeletePostOutput",
    "OwnerPostsOutput",
    "PostListOutput",
    "PostOutput",
    "UploadImageOutput",
    # Ports
    "ImageStorePort",
    "PostRepoPort",
    "TimePort",
]
