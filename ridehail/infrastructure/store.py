"""
In-memory Entity Store.

One ``EntityStore`` instance is built by the application factory (or by a
test) and passed explicitly to every repository and service; there is no
module-level store.

Each entity type lives in a ``Table``:

* identifiers come from a per-table counter starting at 1 and are never
  reused;
* records are frozen dataclasses, replaced wholesale on every write
  (copy-on-write), so previously returned references never change;
* unique secondary indexes (username, email, license plate) are checked
  and written under the store lock, closing the read-then-write race a
  caller-side ``get_by_username`` check would leave open.

``RideTable`` additionally keeps a participant index
(user id -> ids of that user's non-terminal rides) so the
one-active-ride guards do not scan every ride.

All writes go through ``create`` / ``update`` / ``swap``.  They take the
store's re-entrant lock, and callers that need read-guard-write atomicity
across several calls wrap them in ``store.transaction()``.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from ridehail.domain.entities import Rating, Ride, User, Vehicle
from ridehail.domain.errors import ConflictError, NotFoundError

T = TypeVar("T")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Table(Generic[T]):
    def __init__(
        self,
        name: str,
        lock: threading.RLock,
        clock: Clock,
        unique: tuple[str, ...] = (),
        created_field: Optional[str] = None,
    ):
        self.name = name
        self._lock = lock
        self._clock = clock
        self._rows: dict[int, T] = {}
        self._next_id = 1
        self._created_field = created_field
        self._unique: dict[str, dict[Any, int]] = {f: {} for f in unique}

    # ── reads ─────────────────────────────────────────────────────────

    def get(self, entity_id: int) -> Optional[T]:
        return self._rows.get(entity_id)

    def require(self, entity_id: int) -> T:
        row = self._rows.get(entity_id)
        if row is None:
            raise NotFoundError(self.name, entity_id)
        return row

    def find_unique(self, field: str, value: Any) -> Optional[T]:
        with self._lock:
            entity_id = self._unique[field].get(value)
            return None if entity_id is None else self._rows[entity_id]

    def values(self) -> list[T]:
        """Snapshot of all rows in insertion (id) order."""
        with self._lock:
            return list(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    # ── writes ────────────────────────────────────────────────────────

    def create(self, entity: T) -> T:
        """Assign the next id (and creation time, where tracked) and store."""
        with self._lock:
            self._check_unique(entity, None)
            changes: dict[str, Any] = {"id": self._next_id}
            if self._created_field:
                changes[self._created_field] = self._clock()
            row = replace(entity, **changes)
            self._next_id += 1
            self._write(None, row)
            return row

    def update(self, entity_id: int, **changes: Any) -> T:
        """Merge *changes* over the stored record and replace it."""
        changes.pop("id", None)
        with self._lock:
            current = self.require(entity_id)
            row = replace(current, **changes)
            self._check_unique(row, entity_id)
            self._write(current, row)
            return row

    def swap(self, expected: T, new: T) -> T:
        """Compare-and-swap: store *new* only if *expected* is still current."""
        entity_id = getattr(expected, "id")
        with self._lock:
            current = self.require(entity_id)
            if current is not expected:
                raise ConflictError(
                    f"{self.name} {entity_id} was modified concurrently"
                )
            self._check_unique(new, entity_id)
            self._write(current, new)
            return new

    # ── internals ─────────────────────────────────────────────────────

    def _check_unique(self, row: T, own_id: Optional[int]) -> None:
        for field, index in self._unique.items():
            value = getattr(row, field)
            if value is None:
                continue
            holder = index.get(value)
            if holder is not None and holder != own_id:
                raise ConflictError(
                    f"{self.name} with {field} {value!r} already exists",
                    field=field,
                )

    def _write(self, old: Optional[T], new: T) -> None:
        entity_id = getattr(new, "id")
        # Row first: an index entry must never point at a missing row.
        self._rows[entity_id] = new
        for field, index in self._unique.items():
            if old is not None:
                index.pop(getattr(old, field), None)
            value = getattr(new, field)
            if value is not None:
                index[value] = entity_id


class RideTable(Table[Ride]):
    def __init__(self, lock: threading.RLock, clock: Clock):
        super().__init__("Ride", lock, clock)
        self._active_by_user: dict[int, set[int]] = {}

    def active_ride_ids(self, user_id: int) -> list[int]:
        """Ids of *user_id*'s non-terminal rides, oldest first."""
        with self._lock:
            return sorted(self._active_by_user.get(user_id, ()))

    def _write(self, old: Optional[Ride], new: Ride) -> None:
        if old is not None and old.is_active:
            for user_id in (old.passenger_id, old.driver_id):
                if user_id is not None:
                    ids = self._active_by_user.get(user_id)
                    if ids is not None:
                        ids.discard(old.id)
                        if not ids:
                            del self._active_by_user[user_id]
        if new.is_active:
            for user_id in (new.passenger_id, new.driver_id):
                if user_id is not None:
                    self._active_by_user.setdefault(user_id, set()).add(new.id)
        super()._write(old, new)


class EntityStore:
    """Process-lifetime storage for users, vehicles, rides and ratings."""

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock
        self.lock = threading.RLock()
        self.users: Table[User] = Table(
            "User", self.lock, clock,
            unique=("username", "email"), created_field="created_at",
        )
        self.vehicles: Table[Vehicle] = Table(
            "Vehicle", self.lock, clock, unique=("license_plate",)
        )
        self.rides = RideTable(self.lock, clock)
        self.ratings: Table[Rating] = Table(
            "Rating", self.lock, clock, created_field="created_at"
        )

    def now(self) -> datetime:
        return self.clock()

    @contextmanager
    def transaction(self) -> Iterator[EntityStore]:
        """Hold the store lock across a read-guard-write sequence."""
        with self.lock:
            yield self
