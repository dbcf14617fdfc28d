from datetime import datetime
from typing import Any, Protocol

from src.core.ports.db import UserRepoPort
from src.core.ports.storage import ImageStorePort
from src.core.ports.time import TimePort

__all__ = ["AuthAdapterPort", "ImageStorePort", "TimePort", "UserRepoPort"]


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def create_token(
        self, user_id: Any, username: str, ttl_minutes: int, now: datetime | None = None
    ) -> str: ...
    def validate_token(self, token: str) -> dict[str, Any] | None: ...
