"""
Concurrency safety tests.

Demonstrates:
1. Two drivers racing to accept the same request: exactly one wins.
2. A passenger double-submitting a request: exactly one ride is created.
3. Racing registrations with the same username: the store's unique index
   lets only one through.
4. Username lookups while users are being created: never a half-written
   index entry.
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier, Event, Thread

from ridehail.domain.enums import RideStatus, UserType
from ridehail.domain.errors import (
    AlreadyActiveError,
    ConflictError,
    InvalidTransitionError,
    RideHailError,
)
from ridehail.infrastructure.store import EntityStore
from ridehail.services.lifecycle import RideLifecycle
from tests.conftest import make_user, ride_for

WORKERS = 8


def _race(fn, args_list):
    """Run ``fn`` for every args tuple at (roughly) the same instant."""
    barrier = Barrier(len(args_list))

    def run(args):
        barrier.wait()
        try:
            return fn(*args)
        except RideHailError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=len(args_list)) as pool:
        return list(pool.map(run, args_list))


class TestLifecycleRaces:
    def test_single_winner_when_drivers_race(self):
        store = EntityStore()
        lifecycle = RideLifecycle(store)
        passenger = make_user(store, "paula")
        drivers = [make_user(store, f"driver{i}", UserType.DRIVER) for i in range(WORKERS)]
        ride = lifecycle.create_ride(ride_for(passenger.id))

        results = _race(lifecycle.accept_ride, [(ride.id, d.id) for d in drivers])

        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(winners) == 1
        assert all(isinstance(r, InvalidTransitionError) for r in results if r not in winners)
        assert store.rides.get(ride.id).driver_id == winners[0].driver_id

    def test_single_ride_when_passenger_double_submits(self):
        store = EntityStore()
        lifecycle = RideLifecycle(store)
        passenger = make_user(store, "paula")

        results = _race(lifecycle.create_ride, [(ride_for(passenger.id),)] * WORKERS)

        created = [r for r in results if not isinstance(r, Exception)]
        assert len(created) == 1
        assert sum(isinstance(r, AlreadyActiveError) for r in results) == WORKERS - 1
        assert len(store.rides) == 1

    def test_one_driver_cannot_take_two_rides_at_once(self):
        store = EntityStore()
        lifecycle = RideLifecycle(store)
        driver = make_user(store, "diego", UserType.DRIVER)
        rides = [
            lifecycle.create_ride(ride_for(make_user(store, f"p{i}").id))
            for i in range(WORKERS)
        ]

        _race(lifecycle.accept_ride, [(r.id, driver.id) for r in rides])

        accepted = [r for r in store.rides.values() if r.status == RideStatus.ACCEPTED]
        assert len(accepted) == 1


class TestStoreRaces:
    def test_unique_username_under_contention(self):
        store = EntityStore()
        results = _race(make_user, [(store, "same")] * WORKERS)
        assert sum(isinstance(r, ConflictError) for r in results) == WORKERS - 1
        assert len(store.users) == 1

    def test_lookup_waits_for_writer(self):
        store = EntityStore()
        make_user(store, "ana")
        found = []
        with store.transaction():
            reader = Thread(target=lambda: found.append(store.users.find_unique("username", "ana")))
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
        reader.join(timeout=5)
        assert found[0].username == "ana"

    def test_lookups_during_creates_never_fail(self):
        store = EntityStore()
        names = [f"user{i}" for i in range(200)]
        errors = []
        done = Event()

        def read():
            while not done.is_set():
                for name in names:
                    try:
                        user = store.users.find_unique("username", name)
                    except KeyError as exc:
                        errors.append(exc)
                        return
                    if user is not None and user.username != name:
                        errors.append(user)

        reader = Thread(target=read)
        reader.start()
        try:
            for name in names:
                make_user(store, name)
        finally:
            done.set()
            reader.join(timeout=5)
        assert errors == []
        assert len(store.users) == len(names)
