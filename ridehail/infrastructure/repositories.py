"""
Repository Pattern -- keeps services and routes ignorant of how the
``EntityStore`` lays out its tables.

Each repository receives the store and exposes domain-relevant reads and
writes only.  The ride and rating lookups here form the query layer:
read-only projections that re-read current store state on every call and
never cache.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ridehail.domain.entities import Rating, Ride, User, Vehicle
from ridehail.domain.enums import ACTIVE_STATUSES, DRIVER_ACTIVE_STATUSES, RideStatus

from .store import EntityStore


class UserRepository:
    def __init__(self, store: EntityStore):
        self.store = store

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.store.users.get(user_id)

    def require(self, user_id: int) -> User:
        return self.store.users.require(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.store.users.find_unique("username", username)

    def get_by_email(self, email: str) -> Optional[User]:
        # Emails are stored lowercased.
        return self.store.users.find_unique("email", email.strip().lower())

    def create(self, user: User) -> User:
        return self.store.users.create(user)

    def update(self, user_id: int, **changes: Any) -> User:
        return self.store.users.update(user_id, **changes)

    def set_online(self, user_id: int, is_online: bool) -> User:
        return self.update(user_id, is_online=is_online)


class VehicleRepository:
    def __init__(self, store: EntityStore):
        self.store = store

    def get_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        return self.store.vehicles.get(vehicle_id)

    def require(self, vehicle_id: int) -> Vehicle:
        return self.store.vehicles.require(vehicle_id)

    def get_by_driver(self, driver_id: int) -> Optional[Vehicle]:
        """First vehicle registered by *driver_id* (one per driver is assumed)."""
        return next(
            (v for v in self.store.vehicles.values() if v.driver_id == driver_id),
            None,
        )

    def create(self, vehicle: Vehicle) -> Vehicle:
        return self.store.vehicles.create(vehicle)

    def update(self, vehicle_id: int, **changes: Any) -> Vehicle:
        return self.store.vehicles.update(vehicle_id, **changes)


class RideRepository:
    def __init__(self, store: EntityStore):
        self.store = store

    def get_by_id(self, ride_id: int) -> Optional[Ride]:
        return self.store.rides.get(ride_id)

    def require(self, ride_id: int) -> Ride:
        return self.store.rides.require(ride_id)

    def _active_for(self, user_id: int, statuses, role: str) -> Optional[Ride]:
        for ride_id in self.store.rides.active_ride_ids(user_id):
            ride = self.store.rides.get(ride_id)
            if ride is None or ride.status not in statuses:
                continue
            if getattr(ride, role) == user_id:
                return ride
        return None

    def active_for_user(self, user_id: int) -> Optional[Ride]:
        """Non-terminal ride where *user_id* is passenger or driver."""
        for ride_id in self.store.rides.active_ride_ids(user_id):
            ride = self.store.rides.get(ride_id)
            if ride is not None and ride.status in ACTIVE_STATUSES:
                return ride
        return None

    def driver_active(self, driver_id: int) -> Optional[Ride]:
        return self._active_for(driver_id, DRIVER_ACTIVE_STATUSES, "driver_id")

    def passenger_active(self, passenger_id: int) -> Optional[Ride]:
        return self._active_for(passenger_id, ACTIVE_STATUSES, "passenger_id")

    def history_for_user(self, user_id: int, limit: int = 10) -> list[Ride]:
        """Rides involving *user_id*, most recently requested first."""
        rides = [r for r in self.store.rides.values() if r.involves(user_id)]
        rides.sort(
            key=lambda r: (_sort_time(r.requested_at), r.id), reverse=True
        )
        return rides[: max(limit, 0)]

    def completed_by_driver_since(self, driver_id: int, since: datetime) -> list[Ride]:
        return [
            r for r in self.store.rides.values()
            if r.driver_id == driver_id
            and r.status == RideStatus.COMPLETED
            and r.completed_at is not None
            and r.completed_at >= since
        ]


class RatingRepository:
    def __init__(self, store: EntityStore):
        self.store = store

    def get_by_id(self, rating_id: int) -> Optional[Rating]:
        return self.store.ratings.get(rating_id)

    def require(self, rating_id: int) -> Rating:
        return self.store.ratings.require(rating_id)

    def create(self, rating: Rating) -> Rating:
        return self.store.ratings.create(rating)

    def received_by(self, user_id: int) -> list[Rating]:
        """Ratings where *user_id* is the ratee, newest first."""
        ratings = [r for r in self.store.ratings.values() if r.to_user_id == user_id]
        ratings.sort(key=lambda r: (_sort_time(r.created_at), r.id), reverse=True)
        return ratings

    def average_for(self, user_id: int) -> Optional[float]:
        ratings = self.received_by(user_id)
        if not ratings:
            return None
        return round(sum(r.rating for r in ratings) / len(ratings), 2)


def _sort_time(value: Optional[datetime]) -> float:
    return value.timestamp() if value is not None else float("-inf")
