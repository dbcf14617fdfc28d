from pydantic import BaseModel, Field, ValidationInfo, field_validator


class RangeRule(BaseModel):
    min: int
    max: int


class MaxRule(BaseModel):
    max: int


class PostRules(BaseModel):
    title: RangeRule
    subtitle: MaxRule
    categories: list[str]
    default_category: str
    block_types: list[str]
    max_blocks_per_post: int
    unnamed_product: str = "Unnamed product"
    fallback_slug: str = "post"

    @field_validator("default_category")
    @classmethod
    def _default_is_known(cls, v: str, info: ValidationInfo) -> str:
        categories = info.data.get("categories") or []
        if categories and v not in categories:
            raise ValueError(f"default_category '{v}' is not one of {categories}")
        return v


class CommentRules(BaseModel):
    text: RangeRule
    placeholder_avatar_url: str


class PaginationRules(BaseModel):
    default_page_size: int = 10
    max_page_size: int = 100


class UploadFolders(BaseModel):
    posts: str = "blog/posts"
    editor: str = "blog/editor-images"
    avatars: str = "profile"


class UploadsRules(BaseModel):
    max_upload_bytes: int
    allowlist_extensions: list[str]
    folders: UploadFolders = Field(default_factory=UploadFolders)


class EngagementRules(BaseModel):
    bind_to_requester: bool = True


class AuthRules(BaseModel):
    token_ttl_minutes: int
    password_min_length: int
    username: RangeRule


class Rules(BaseModel):
    posts: PostRules
    comments: CommentRules
    pagination: PaginationRules
    uploads: UploadsRules
    engagement: EngagementRules
    auth: AuthRules
