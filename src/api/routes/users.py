from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile

from src.adapters.clock import SystemClock
from src.adapters.local_storage import LocalImageStore
from src.adapters.sqlite.repos import SQLiteUserRepo
from src.api.deps import (
    get_clock,
    get_current_user,
    get_image_store,
    get_policy,
    get_rules,
    get_user_repo,
)
from src.api.errors import raise_for_errors
from src.api.schemas import UserResponse
from src.components.auth.component import run_get_user, run_update_avatar
from src.components.auth.models import GetUserInput, UpdateAvatarInput
from src.domain.entities import User
from src.domain.policy import PolicyEngine
from src.rules.models import Rules

router = APIRouter()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UUID,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> UserResponse:
    """Public profile of a user."""
    result = run_get_user(GetUserInput(user_id=user_id), user_repo=user_repo)
    if not result.success or result.user is None:
        raise_for_errors(result.errors)
    return UserResponse.model_validate(result.user)


@router.put("/{user_id}/avatar", response_model=UserResponse)
def update_avatar(
    user_id: UUID,
    avatar: Annotated[UploadFile, File()],
    current_user: User = Depends(get_current_user),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    storage: LocalImageStore = Depends(get_image_store),
    clock: SystemClock = Depends(get_clock),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> UserResponse:
    """Replace the avatar of the requester."""
    inp = UpdateAvatarInput(
        user_id=user_id,
        requester_id=current_user.id,
        filename=avatar.filename or "",
        data=avatar.file.read(),
        content_type=avatar.content_type or "",
    )
    result = run_update_avatar(
        inp,
        user_repo=user_repo,
        storage=storage,
        time=clock,
        policy=policy,
        rules=rules.uploads,
    )
    if not result.success or result.user is None:
        raise_for_errors(result.errors)
    return UserResponse.model_validate(result.user)
