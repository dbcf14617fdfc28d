"""
Object storage port for post images and avatars.

Implementations: local filesystem (src.adapters.local_storage).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredImage:
    url: str
    storage_id: str


class ImageStorePort(Protocol):
    def store(
        self, data: bytes, folder: str, filename: str = "", content_type: str = ""
    ) -> StoredImage:
        """
        Store bytes under a fresh id inside folder.

        Raises:
            StorageError: On transport or credential failure.
        """
        ...

    def delete(self, storage_id: str) -> bool:
        """True if deleted, False if the id was not found. Raises StorageError."""
        ...

    def get(self, storage_id: str) -> tuple[bytes, str]:
        """Return (bytes, content_type). Raises KeyNotFoundError."""
        ...


class StorageError(Exception):
    """Base class for storage errors."""


class KeyNotFoundError(StorageError):
    """Raised when key doesn't exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Key not found: {key}")
