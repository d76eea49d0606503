# parish/api/errors.py
from __future__ import annotations

from fastapi import HTTPException, status

from parish.services.exceptions import (
    ConcurrencyConflictError,
    InvalidTransitionError,
    NotFoundError,
    ParishError,
    ValidationError,
)


def http_error(exc: ParishError) -> HTTPException:
    """Translate a service-layer error into the HTTPException routers raise."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, (InvalidTransitionError, ConcurrencyConflictError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
