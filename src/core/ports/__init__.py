# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import (
    MutationRejected,
    PostRepoPort,
    SlugConflictError,
    UserConflictError,
    UserRepoPort,
)
from src.core.ports.storage import ImageStorePort, KeyNotFoundError, StorageError, StoredImage
from src.core.ports.time import TimePort

__all__ = [
    "ImageStorePort",
    "KeyNotFoundError",
    "MutationRejected",
    "PostRepoPort",
    "SlugConflictError",
    "StorageError",
    "StoredImage",
    "TimePort",
    "UserConflictError",
    "UserRepoPort",
]
