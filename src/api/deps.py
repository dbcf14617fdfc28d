import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.local_storage import LocalImageStore, StorageConfig
from src.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from src.components.auth import VerifyTokenInput, run_verify_token
from src.domain.blocks import BlockValidator
from src.domain.entities import User
from src.domain.policy import PolicyEngine
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("BLOG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "blog.db")
        self.media_dir = self.data_dir / "media"
        self.media_base_url = os.environ.get("BLOG_MEDIA_BASE_URL", "/media")
        self.secret_key = os.environ.get("BLOG_SECRET_KEY", "dev-secret-unsafe")
        self.rules_path = Path(os.environ.get("BLOG_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = str(self.base_dir / "migrations")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


# --- Repos ---
def get_post_repo(settings: Settings = Depends(get_settings)) -> SQLitePostRepo:
    return SQLitePostRepo(settings.db_path)


def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


# --- Adapters ---
def get_image_store(settings: Settings = Depends(get_settings)) -> LocalImageStore:
    return LocalImageStore(
        StorageConfig(base_path=settings.media_dir, public_base_url=settings.media_base_url)
    )


def get_auth_adapter(settings: Settings = Depends(get_settings)) -> JWTAuthAdapter:
    return JWTAuthAdapter(secret_key=settings.secret_key)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Services ---
def get_policy() -> PolicyEngine:
    return PolicyEngine()


def get_block_validator(rules: Rules = Depends(get_rules)) -> BlockValidator:
    return BlockValidator(rules.posts)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _request_token(request: Request, header_token: str | None) -> str | None:
    if header_token:
        return header_token
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token.split(" ", 1)[1]
    return cookie_token or None


def _resolve(
    token: str, user_repo: SQLiteUserRepo, auth_adapter: JWTAuthAdapter
) -> User | None:
    result = run_verify_token(
        VerifyTokenInput(token=token), user_repo=user_repo, auth_adapter=auth_adapter
    )
    return result.user if result.success else None


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
) -> User:
    """Requester from the Authorization header or the access_token cookie."""
    token = _request_token(request, token)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = _resolve(token, user_repo, auth_adapter)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
) -> User | None:
    """Like get_current_user, but anonymous or invalid credentials yield None."""
    token = _request_token(request, token)
    if not token:
        return None
    return _resolve(token, user_repo, auth_adapter)
