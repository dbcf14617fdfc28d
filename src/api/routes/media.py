from fastapi import APIRouter, Depends, HTTPException, Response

from src.adapters.local_storage import LocalImageStore
from src.api.deps import get_image_store
from src.core.ports.storage import StorageError

router = APIRouter()


@router.get("/{storage_id:path}")
def get_media(
    storage_id: str,
    storage: LocalImageStore = Depends(get_image_store),
) -> Response:
    """Serve a stored image by its storage id."""
    try:
        data, content_type = storage.get(storage_id)
    except StorageError:
        # Missing keys and traversal attempts look the same to clients
        raise HTTPException(status_code=404, detail="Media not found") from None

    return Response(
        content=data,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
