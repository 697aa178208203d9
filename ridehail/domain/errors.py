"""
Error taxonomy raised by the core and translated to HTTP by the API layer.

The core never retries: every operation is a deterministic in-memory
read/compute/write, so a failure either leaves state untouched or the
whole update lands.
"""

from __future__ import annotations

from typing import Iterable, Optional


class RideHailError(Exception):
    """Base class; ``detail`` is the user-facing message."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(RideHailError):
    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(RideHailError):
    """The ride is not in the status the operation requires."""

    def __init__(self, ride_id: int, required: Iterable[str], actual: str):
        self.ride_id = ride_id
        self.required = tuple(required)
        self.actual = actual
        super().__init__(
            f"Ride {ride_id} must be {' or '.join(self.required)}, "
            f"but is {actual}"
        )


class AlreadyActiveError(RideHailError):
    """A participant already holds a non-terminal ride."""

    def __init__(self, user_id: int, ride_id: int, role: str = "User"):
        super().__init__(
            f"{role} {user_id} already has an active ride ({ride_id})"
        )
        self.user_id = user_id
        self.ride_id = ride_id


class ConflictError(RideHailError):
    """Unique index violation or a lost compare-and-swap."""

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.field = field


class PermissionDeniedError(RideHailError):
    pass


class AuthenticationError(RideHailError):
    pass


class InvalidInputError(RideHailError):
    """A value the request schema let through but the core cannot store."""
