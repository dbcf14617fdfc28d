from typing import NoReturn

from fastapi import HTTPException, status

from src.core.entities import PostError

STATUS_BY_CODE = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "storage_error": status.HTTP_502_BAD_GATEWAY,
    "conflict": status.HTTP_409_CONFLICT,
}


def raise_for_errors(errors: list[PostError]) -> NoReturn:
    """Raise an HTTPException for the first error; the rest ride along in detail."""
    first = errors[0] if errors else PostError(code="validation_error", message="Request failed")
    raise HTTPException(
        status_code=STATUS_BY_CODE.get(first.code, status.HTTP_400_BAD_REQUEST),
        detail={
            "message": first.message,
            "errors": [
                {"code": e.code, "message": e.message, "field": e.field} for e in errors
            ],
        },
    )
