import os
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt
from passlib.context import CryptContext

SECRET_KEY = os.environ.get("BLOG_SECRET_KEY", "dev-secret-unsafe")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7 days

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    result: bool = pwd_context.verify(plain_password, hashed_password)
    return result


def get_password_hash(password: str) -> str:
    result: str = pwd_context.hash(password)
    return result


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
    now_utc: datetime | None = None,
    secret_key: str | None = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to encode in the token
        expires_delta: Lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES
        now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
        secret_key: Signing key; defaults to BLOG_SECRET_KEY
    """
    to_encode = data.copy()
    current_time = now_utc if now_utc is not None else datetime.now(UTC)
    expire = current_time + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({"exp": expire, "iat": current_time})
    encoded_jwt: str = jwt.encode(to_encode, secret_key or SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str, secret_key: str | None = None) -> dict[str, Any] | None:
    """Claims of a valid, unexpired token; None for anything else."""
    try:
        payload = jwt.decode(token, secret_key or SECRET_KEY, algorithms=[ALGORITHM])
        return cast(dict[str, Any], payload)
    except jwt.JWTError:
        return None
