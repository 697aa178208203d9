"""
Domain entities.

Patterns used
-------------
- **Immutable records**: every entity is a frozen dataclass.  The store
  replaces records wholesale (``dataclasses.replace``), so a caller holding
  an earlier reference never sees it change underneath them.
- **State Pattern** on ``Ride``: ``advance`` enforces valid lifecycle
  transitions (requested -> accepted -> in_progress -> completed, with
  cancelled reachable from every non-terminal status) and stamps the
  matching timestamp.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from .enums import (
    ACTIVE_STATUSES,
    RIDE_TRANSITIONS,
    STATUS_TIMESTAMP_FIELDS,
    RideStatus,
    UserType,
    VehicleType,
)
from .errors import InvalidTransitionError


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class User:
    username: str
    password: str  # bcrypt hash, never the plain credential
    full_name: str
    email: str
    id: Optional[int] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    user_type: UserType = UserType.PASSENGER
    language: str = "pt"
    is_online: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_driver(self) -> bool:
        return self.user_type == UserType.DRIVER


@dataclass(frozen=True)
class Vehicle:
    driver_id: int
    model: str
    year: str
    color: str
    license_plate: str
    id: Optional[int] = None
    vehicle_type: VehicleType = VehicleType.ECONOMY


@dataclass(frozen=True)
class Ride:
    origin_address: str
    destination_address: str
    id: Optional[int] = None
    passenger_id: Optional[int] = None
    driver_id: Optional[int] = None
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    status: RideStatus = RideStatus.REQUESTED
    requested_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    distance: Optional[float] = None  # km
    duration: Optional[int] = None  # minutes
    fare: Optional[float] = None
    vehicle_type: VehicleType = VehicleType.ECONOMY
    payment_method: str = "credit_card"

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def origin(self) -> Optional[Location]:
        if self.origin_lat is None or self.origin_lng is None:
            return None
        return Location(self.origin_lat, self.origin_lng)

    @property
    def destination(self) -> Optional[Location]:
        if self.destination_lat is None or self.destination_lng is None:
            return None
        return Location(self.destination_lat, self.destination_lng)

    def involves(self, user_id: int) -> bool:
        return user_id in (self.passenger_id, self.driver_id)

    def counterpart_of(self, user_id: int) -> Optional[int]:
        """The other participant, or ``None`` if *user_id* is not on the ride."""
        if user_id == self.passenger_id:
            return self.driver_id
        if user_id == self.driver_id:
            return self.passenger_id
        return None

    def advance(self, new_status: RideStatus, at: datetime, **changes: Any) -> Ride:
        """Return a copy moved to *new_status*, or raise if the move is illegal."""
        if new_status not in RIDE_TRANSITIONS.get(self.status, set()):
            required = [
                s.value for s, targets in RIDE_TRANSITIONS.items()
                if new_status in targets
            ]
            raise InvalidTransitionError(self.id, required, self.status.value)
        changes[STATUS_TIMESTAMP_FIELDS[new_status]] = at
        return replace(self, status=new_status, **changes)


@dataclass(frozen=True)
class Rating:
    ride_id: int
    from_user_id: int
    to_user_id: int
    rating: int
    id: Optional[int] = None
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
