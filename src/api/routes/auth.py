from fastapi import APIRouter, Depends, Response, status

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteUserRepo
from src.api.deps import get_auth_adapter, get_clock, get_current_user, get_rules, get_user_repo
from src.api.errors import raise_for_errors
from src.api.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from src.components.auth.component import run_login, run_register
from src.components.auth.models import LoginInput, RegisterInput
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> UserResponse:
    """Create an account with the default avatar."""
    result = run_register(
        RegisterInput(username=req.username, email=req.email, password=req.password),
        user_repo=user_repo,
        auth_adapter=auth_adapter,
        time=clock,
        rules=rules.auth,
    )
    if not result.success or result.user is None:
        raise_for_errors(result.errors)
    return UserResponse.model_validate(result.user)


@router.post("/login", response_model=TokenResponse)
def login(
    req: LoginRequest,
    response: Response,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> TokenResponse:
    """Authenticate with email and password and return a bearer token."""
    result = run_login(
        LoginInput(email=req.email, password=req.password),
        user_repo=user_repo,
        auth_adapter=auth_adapter,
        time=clock,
        rules=rules.auth,
    )
    if not result.success or result.user is None or result.token is None:
        raise_for_errors(result.errors)

    # Set HttpOnly Cookie
    max_age = rules.auth.token_ttl_minutes * 60
    response.set_cookie(
        key="access_token",
        value=f"Bearer {result.token}",
        httponly=True,
        max_age=max_age,
        expires=max_age,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )
    return TokenResponse(access_token=result.token, user=UserResponse.model_validate(result.user))


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    """Log out user by clearing cookie."""
    response.delete_cookie(key="access_token")
    return {"status": "success"}


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Get current user info."""
    return UserResponse.model_validate(current_user)
