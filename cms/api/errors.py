"""
Mapping from component errors to HTTP responses.
"""

from collections.abc import Sequence
from typing import NoReturn, Protocol
from uuid import UUID

from fastapi import HTTPException, status

STATUS_CODES = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
}


class ComponentError(Protocol):
    @property
    def code(self) -> str:
        ...

    @property
    def message(self) -> str:
        ...


def raise_for(errors: Sequence[ComponentError]) -> NoReturn:
    """Raise the HTTP error for the first component error; anything unmapped is a 400."""
    if not errors:
        raise HTTPException(status_code=500, detail="Server error")
    err = errors[0]
    raise HTTPException(
        status_code=STATUS_CODES.get(err.code, status.HTTP_400_BAD_REQUEST), detail=err.message
    )


def parse_uuid(raw: str, not_found_detail: str) -> UUID:
    """Parse a path id. A malformed id names no record, so it is a 404."""
    try:
        return UUID(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=not_found_detail
        ) from None
