"""
Ride Lifecycle Engine
=====================

Transition table
----------------
======================  =====================  ==========================
operation               required status        effect
======================  =====================  ==========================
create_ride             (new)                  requested, requested_at
accept_ride             requested              accepted, driver_id, accepted_at
decline_ride            requested              cancelled, cancelled_at
mark_driver_arrived     accepted               none (notification only)
start_ride              accepted               in_progress, started_at
complete_ride           in_progress            completed, completed_at
cancel_ride             any non-terminal       cancelled, cancelled_at
======================  =====================  ==========================

Guards
------
* A passenger may hold one ride in {requested, accepted, in_progress}.
* A driver may hold one ride in {accepted, in_progress}.

The engine keeps no state.  Each operation reads the current record,
computes the next one and writes it back with a compare-and-swap, all
while holding the store lock, so either the whole status + timestamp
update lands or nothing changes.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ridehail.domain.entities import Ride
from ridehail.domain.enums import RideStatus
from ridehail.domain.errors import (
    AlreadyActiveError,
    InvalidTransitionError,
    PermissionDeniedError,
)
from ridehail.infrastructure.repositories import RideRepository
from ridehail.infrastructure.store import EntityStore

logger = logging.getLogger(__name__)


class RideLifecycle:
    def __init__(self, store: EntityStore):
        self.store = store
        self.rides = RideRepository(store)

    # ── creation ──────────────────────────────────────────────────────

    def create_ride(self, ride: Ride) -> Ride:
        """Store *ride* as a fresh request for its passenger."""
        with self.store.transaction():
            if ride.passenger_id is not None:
                existing = self.rides.passenger_active(ride.passenger_id)
                if existing is not None:
                    logger.warning(
                        "Passenger %d already has active ride %d",
                        ride.passenger_id, existing.id,
                    )
                    raise AlreadyActiveError(
                        ride.passenger_id, existing.id, role="Passenger"
                    )
            new = replace(
                ride,
                driver_id=None,
                status=RideStatus.REQUESTED,
                requested_at=self.store.now(),
                accepted_at=None,
                started_at=None,
                completed_at=None,
                cancelled_at=None,
            )
            created = self.store.rides.create(new)
        logger.info("Ride %d requested by passenger %s", created.id, created.passenger_id)
        return created

    # ── transitions ───────────────────────────────────────────────────

    def accept_ride(self, ride_id: int, driver_id: int) -> Ride:
        with self.store.transaction():
            ride = self.rides.require(ride_id)
            self._expect(ride, RideStatus.REQUESTED)
            existing = self.rides.driver_active(driver_id)
            if existing is not None:
                logger.warning(
                    "Driver %d already has active ride %d", driver_id, existing.id
                )
                raise AlreadyActiveError(driver_id, existing.id, role="Driver")
            updated = ride.advance(
                RideStatus.ACCEPTED, self.store.now(), driver_id=driver_id
            )
            return self._commit(ride, updated)

    def decline_ride(self, ride_id: int) -> Ride:
        with self.store.transaction():
            ride = self.rides.require(ride_id)
            self._expect(ride, RideStatus.REQUESTED)
            return self._commit(ride, ride.advance(RideStatus.CANCELLED, self.store.now()))

    def mark_driver_arrived(self, ride_id: int, *, acting_driver_id: Optional[int] = None) -> Ride:
        """Check the ride is awaiting pickup; the status stays ``accepted``."""
        with self.store.transaction():
            ride = self.rides.require(ride_id)
            self._expect(ride, RideStatus.ACCEPTED)
            self._expect_driver(ride, acting_driver_id)
        logger.info("Ride %d: driver %s arrived at pickup", ride.id, ride.driver_id)
        return ride

    def start_ride(self, ride_id: int, *, acting_driver_id: Optional[int] = None) -> Ride:
        with self.store.transaction():
            ride = self.rides.require(ride_id)
            self._expect(ride, RideStatus.ACCEPTED)
            self._expect_driver(ride, acting_driver_id)
            return self._commit(ride, ride.advance(RideStatus.IN_PROGRESS, self.store.now()))

    def complete_ride(self, ride_id: int, *, acting_driver_id: Optional[int] = None) -> Ride:
        with self.store.transaction():
            ride = self.rides.require(ride_id)
            self._expect(ride, RideStatus.IN_PROGRESS)
            self._expect_driver(ride, acting_driver_id)
            return self._commit(ride, ride.advance(RideStatus.COMPLETED, self.store.now()))

    def cancel_ride(self, ride_id: int, *, acting_user_id: Optional[int] = None) -> Ride:
        with self.store.transaction():
            ride = self.rides.require(ride_id)
            if acting_user_id is not None and not ride.involves(acting_user_id):
                raise PermissionDeniedError(
                    f"User {acting_user_id} is not a participant of ride {ride.id}"
                )
            return self._commit(ride, ride.advance(RideStatus.CANCELLED, self.store.now()))

    # ── internals ─────────────────────────────────────────────────────

    @staticmethod
    def _expect(ride: Ride, required: RideStatus) -> None:
        if ride.status != required:
            logger.warning(
                "Ride %d: expected %s, found %s", ride.id, required.value, ride.status.value
            )
            raise InvalidTransitionError(ride.id, [required.value], ride.status.value)

    @staticmethod
    def _expect_driver(ride: Ride, driver_id: Optional[int]) -> None:
        if driver_id is not None and ride.driver_id != driver_id:
            raise PermissionDeniedError(
                f"Driver {driver_id} is not assigned to ride {ride.id}"
            )

    def _commit(self, old: Ride, new: Ride) -> Ride:
        stored = self.store.rides.swap(old, new)
        logger.info("Ride %d: %s -> %s", stored.id, old.status.value, stored.status.value)
        return stored
