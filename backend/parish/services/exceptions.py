"""
Exceptions raised by the parish service layer.

Routers translate these into HTTP responses; services never raise
HTTPException themselves.
"""
from typing import Any


class ParishError(Exception):
    """Base class for service-layer errors."""
    pass


class NotFoundError(ParishError):
    """Raised when an entity id does not resolve (or has nothing to serve)."""
    def __init__(self, entity: str, entity_id: Any, message: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} not found")


class ValidationError(ParishError):
    """Raised when input is well-formed JSON but violates a business rule."""
    pass


class InvalidTransitionError(ParishError):
    """Raised when a status change is not allowed by the transition table."""
    def __init__(self, request_id: int, current: str, attempted: str):
        self.request_id = request_id
        self.current = current
        self.attempted = attempted
        super().__init__(f"Cannot move request {request_id} from {current} to {attempted}")


class ConcurrencyConflictError(ParishError):
    """Raised when the caller's expected version does not match the stored one."""
    def __init__(self, request_id: int, expected_version: int, actual_version: int | None):
        self.request_id = request_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Request {request_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
