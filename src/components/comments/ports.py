"""
Comments component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.core.entities import User
from src.core.ports.db import PostRepoPort
from src.core.ports.time import TimePort

__all__ = ["PostRepoPort", "TimePort", "UserDirectoryPort"]


class UserDirectoryPort(Protocol):
    """Resolves comment authors to their current profile."""

    def get_by_id(self, user_id: UUID) -> User | None: ...
