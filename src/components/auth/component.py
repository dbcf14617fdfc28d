import logging
from uuid import UUID

from src.core.entities import ErrorCode, PostError, User
from src.core.ports.db import UserConflictError
from src.core.ports.storage import StorageError
from src.domain.entities import DEFAULT_AVATAR_URL
from src.domain.policy import PolicyEngine
from src.domain.uploads import check_upload
from src.rules.models import AuthRules, UploadsRules

from .models import (
    AuthOutput,
    GetUserInput,
    LoginInput,
    RegisterInput,
    UpdateAvatarInput,
    UserOutput,
    VerifyTokenInput,
)
from .ports import AuthAdapterPort, ImageStorePort, TimePort, UserRepoPort

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_MINUTES = 60 * 24 * 7
DEFAULT_PASSWORD_MIN = 6
DEFAULT_USERNAME_MIN = 3
DEFAULT_USERNAME_MAX = 32
DEFAULT_AVATAR_FOLDER = "profile"

INVALID_CREDENTIALS = "Invalid email or password"


def _error(code: ErrorCode, message: str, field: str | None = None) -> PostError:
    return PostError(code=code, message=message, field=field)


def _validate_registration(inp: RegisterInput, rules: AuthRules | None) -> list[PostError]:
    user_min = rules.username.min if rules else DEFAULT_USERNAME_MIN
    user_max = rules.username.max if rules else DEFAULT_USERNAME_MAX
    pw_min = rules.password_min_length if rules else DEFAULT_PASSWORD_MIN

    errors = []
    username = inp.username.strip()
    if not user_min <= len(username) <= user_max:
        errors.append(
            _error(
                "validation_error",
                f"Username must be {user_min}-{user_max} characters",
                "username",
            )
        )
    email = inp.email.strip()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        errors.append(_error("validation_error", "A valid email is required", "email"))
    if len(inp.password) < pw_min:
        errors.append(
            _error("validation_error", f"Password must be at least {pw_min} characters", "password")
        )
    return errors


def run_register(
    inp: RegisterInput,
    *,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
    rules: AuthRules | None = None,
) -> UserOutput:
    errors = _validate_registration(inp, rules)
    if errors:
        return UserOutput(success=False, errors=errors)

    username = inp.username.strip()
    email = inp.email.strip().lower()
    if user_repo.get_by_email(email) or user_repo.get_by_username(username):
        return UserOutput(
            success=False,
            errors=[_error("validation_error", "Email or username already registered")],
        )

    now = time.now_utc()
    user = User(
        username=username,
        email=email,
        password_hash=auth_adapter.hash_password(inp.password),
        avatar_url=DEFAULT_AVATAR_URL,
        created_at=now,
        updated_at=now,
    )
    try:
        user_repo.save(user)
    except UserConflictError as e:
        # Lost a race with a concurrent registration
        logger.info("Registration for %s rejected: %s taken", username, e.field)
        return UserOutput(
            success=False,
            errors=[_error("conflict", "Email or username already registered", e.field)],
        )
    logger.info("Registered user %s (%s)", user.id, user.username)
    return UserOutput(user=user, success=True)


def run_login(
    inp: LoginInput,
    *,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
    rules: AuthRules | None = None,
) -> AuthOutput:
    user = user_repo.get_by_email(inp.email.strip().lower())
    if not user or not auth_adapter.verify_password(inp.password, user.password_hash):
        return AuthOutput(success=False, errors=[_error("validation_error", INVALID_CREDENTIALS)])

    if user.status != "active":
        return AuthOutput(
            success=False, errors=[_error("forbidden", "User account is disabled")]
        )

    ttl = rules.token_ttl_minutes if rules else DEFAULT_TOKEN_TTL_MINUTES
    token = auth_adapter.create_token(user.id, user.username, ttl, now=time.now_utc())
    return AuthOutput(user=user, token=token, success=True)


def run_verify_token(
    inp: VerifyTokenInput,
    *,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
) -> AuthOutput:
    """Resolve a bearer token to a live, active user."""
    payload = auth_adapter.validate_token(inp.token)
    if not payload:
        return AuthOutput(success=False, errors=[_error("validation_error", "Invalid token")])

    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        return AuthOutput(success=False, errors=[_error("validation_error", "Invalid token")])

    user = user_repo.get_by_id(user_id)
    if not user or user.status != "active":
        return AuthOutput(success=False, errors=[_error("not_found", "User not found")])
    return AuthOutput(user=user, token=inp.token, success=True)


def run_get_user(inp: GetUserInput, *, user_repo: UserRepoPort) -> UserOutput:
    user = user_repo.get_by_id(inp.user_id)
    if not user:
        return UserOutput(success=False, errors=[_error("not_found", "User not found")])
    return UserOutput(user=user, success=True)


def run_update_avatar(
    inp: UpdateAvatarInput,
    *,
    user_repo: UserRepoPort,
    storage: ImageStorePort,
    time: TimePort,
    policy: PolicyEngine | None = None,
    rules: UploadsRules | None = None,
) -> UserOutput:
    """
    Replace a user's avatar. Only the user themself may do this.

    The previous stored avatar is removed best-effort after the new one
    is saved.
    """
    policy = policy or PolicyEngine()
    if not policy.can_manage_user(inp.requester_id, inp.user_id):
        return UserOutput(
            success=False, errors=[_error("forbidden", "Cannot change another user's avatar")]
        )

    user = user_repo.get_by_id(inp.user_id)
    if not user:
        return UserOutput(success=False, errors=[_error("not_found", "User not found")])

    message = check_upload(inp.filename, inp.data, rules)
    if message:
        return UserOutput(success=False, errors=[_error("validation_error", message, "avatar")])

    folder = rules.folders.avatars if rules else DEFAULT_AVATAR_FOLDER
    try:
        image = storage.store(
            inp.data, folder, filename=inp.filename, content_type=inp.content_type
        )
    except StorageError as e:
        logger.error("Avatar upload failed for user %s: %s", user.id, e)
        return UserOutput(
            success=False, errors=[_error("storage_error", f"Avatar upload failed: {e}", "avatar")]
        )

    previous = user.avatar_storage_id
    user.avatar_url = image.url
    user.avatar_storage_id = image.storage_id
    user.updated_at = time.now_utc()
    user_repo.save(user)

    if previous:
        try:
            storage.delete(previous)
        except StorageError as e:
            logger.warning("Failed to delete previous avatar %s: %s", previous, e)

    return UserOutput(user=user, success=True)
