from datetime import datetime, timedelta
from typing import Any

from src.api.auth_utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


class JWTAuthAdapter:
    """Auth adapter that issues HS256 JWTs and hashes passwords with argon2 via passlib."""

    def __init__(self, secret_key: str | None = None) -> None:
        self.secret_key = secret_key

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def create_token(
        self, user_id: Any, username: str, ttl_minutes: int, now: datetime | None = None
    ) -> str:
        return create_access_token(
            {"sub": str(user_id), "username": username},
            timedelta(minutes=ttl_minutes),
            now_utc=now,
            secret_key=self.secret_key,
        )

    def validate_token(self, token: str) -> dict[str, Any] | None:
        payload = decode_access_token(token, secret_key=self.secret_key)
        if not payload or not payload.get("sub"):
            return None
        return payload
