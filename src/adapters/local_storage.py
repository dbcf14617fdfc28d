"""
Local Filesystem Image Storage Adapter.

Implements ImageStorePort on the local filesystem for development and
single-server deployments. Storage ids look like "blog/posts/<uuid>.png";
public URLs are "<public_base_url>/<storage id>".
"""

from __future__ import annotations

import json
import logging
import mimetypes
import os
import re
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from src.core.ports.storage import KeyNotFoundError, StorageError, StoredImage

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"[^a-zA-Z0-9_-]")
_EXT_RE = re.compile(r"^\.[a-zA-Z0-9]{1,8}$")


@dataclass(frozen=True)
class StorageConfig:
    """Injected at construction; nothing reads storage settings per request."""

    base_path: Path
    public_base_url: str = "/media"
    allow_delete: bool = True
    create_dirs: bool = True


class LocalImageStore:
    def __init__(self, config: StorageConfig) -> None:
        self.config = config
        self.base_path = Path(config.base_path).resolve()

        if config.create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def _safe_path(self, storage_id: str) -> Path:
        target = (self.base_path / storage_id).resolve()
        if not str(target).startswith(str(self.base_path) + os.sep):
            raise StorageError(f"Path traversal attempt detected: {storage_id}")
        return target

    def _meta_path(self, target: Path) -> Path:
        return target.with_name(target.name + ".meta.json")

    def _folder(self, folder: str) -> str:
        parts = [_SEGMENT_RE.sub("", p) for p in folder.split("/")]
        return "/".join(p for p in parts if p) or "misc"

    def url_for(self, storage_id: str) -> str:
        return f"{self.config.public_base_url.rstrip('/')}/{storage_id}"

    def store(
        self, data: bytes, folder: str, filename: str = "", content_type: str = ""
    ) -> StoredImage:
        ext = os.path.splitext(filename)[1].lower()
        if not _EXT_RE.match(ext):
            ext = mimetypes.guess_extension(content_type or "") or ""

        storage_id = f"{self._folder(folder)}/{uuid4().hex}{ext}"
        target = self._safe_path(storage_id)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                f.write(data)
            with open(self._meta_path(target), "w") as f:
                json.dump(
                    {
                        "content_type": content_type
                        or mimetypes.guess_type(target.name)[0]
                        or "application/octet-stream",
                        "size_bytes": len(data),
                        "filename_original": filename,
                    },
                    f,
                )
        except OSError as e:
            raise StorageError(f"Failed to store {storage_id}: {e}") from e

        return StoredImage(url=self.url_for(storage_id), storage_id=storage_id)

    def get(self, storage_id: str) -> tuple[bytes, str]:
        target = self._safe_path(storage_id)
        if not target.is_file():
            raise KeyNotFoundError(storage_id)

        content_type = "application/octet-stream"
        meta_path = self._meta_path(target)
        if meta_path.exists():
            with open(meta_path) as f:
                content_type = json.load(f).get("content_type", content_type)

        with open(target, "rb") as f:
            return f.read(), content_type

    def delete(self, storage_id: str) -> bool:
        if not self.config.allow_delete:
            raise StorageError("Delete not allowed: storage is configured as immutable")

        target = self._safe_path(storage_id)
        if not target.is_file():
            return False

        try:
            target.unlink()
            meta_path = self._meta_path(target)
            if meta_path.exists():
                meta_path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {storage_id}: {e}") from e

        logger.debug("Deleted stored object %s", storage_id)
        return True


def create_local_storage(
    base_path: str | Path | None = None,
    *,
    env_var: str = "BLOG_MEDIA_DIR",
    default_path: str = "./data/media",
    public_base_url: str = "/media",
) -> LocalImageStore:
    """Factory building StorageConfig from an explicit path or the environment."""
    if base_path is None:
        base_path = os.environ.get(env_var, default_path)

    return LocalImageStore(StorageConfig(base_path=Path(base_path), public_base_url=public_base_url))
