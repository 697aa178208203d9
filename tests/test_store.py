"""Unit tests for the in-memory entity store."""

from dataclasses import replace

import pytest

from ridehail.domain.entities import Vehicle
from ridehail.domain.enums import RideStatus, UserType
from ridehail.domain.errors import ConflictError, NotFoundError
from ridehail.infrastructure.store import EntityStore
from tests.conftest import make_user, ride_for


class TestIdentifiers:
    def test_ids_start_at_one_and_increase(self, store: EntityStore):
        first = make_user(store, "ana")
        second = make_user(store, "bia")
        assert (first.id, second.id) == (1, 2)

    def test_counters_are_per_table(self, store: EntityStore):
        user = make_user(store, "ana", UserType.DRIVER)
        vehicle = store.vehicles.create(
            Vehicle(driver_id=user.id, model="Civic", year="2020", color="Black", license_plate="ABC-1234")
        )
        ride = store.rides.create(ride_for(user.id))
        assert user.id == vehicle.id == ride.id == 1

    def test_creation_time_is_stamped(self, store: EntityStore):
        user = make_user(store, "ana")
        assert user.created_at is not None


class TestGetAndUpdate:
    def test_get_missing_returns_none(self, store: EntityStore):
        assert store.users.get(42) is None

    def test_update_missing_raises(self, store: EntityStore):
        with pytest.raises(NotFoundError, match="User 42 not found"):
            store.users.update(42, full_name="Nobody")

    def test_update_merges_fields(self, store: EntityStore):
        user = make_user(store, "ana")
        updated = store.users.update(user.id, is_online=True)
        assert updated.is_online is True
        assert updated.username == "ana"

    def test_update_is_copy_on_write(self, store: EntityStore):
        user = make_user(store, "ana")
        store.users.update(user.id, full_name="Ana Maria")
        assert user.full_name == "Ana"
        assert store.users.get(user.id).full_name == "Ana Maria"

    def test_update_cannot_change_id(self, store: EntityStore):
        user = make_user(store, "ana")
        assert store.users.update(user.id, id=99).id == user.id


class TestUniqueIndexes:
    def test_duplicate_username_rejected(self, store: EntityStore):
        make_user(store, "ana")
        with pytest.raises(ConflictError) as exc:
            make_user(store, "ana")
        assert exc.value.field == "username"
        assert len(store.users) == 1

    def test_duplicate_email_on_update_rejected(self, store: EntityStore):
        make_user(store, "ana")
        bia = make_user(store, "bia")
        with pytest.raises(ConflictError):
            store.users.update(bia.id, email="ana@example.com")
        assert store.users.get(bia.id).email == "bia@example.com"

    def test_updated_value_frees_old_one(self, store: EntityStore):
        ana = make_user(store, "ana")
        store.users.update(ana.id, email="new@example.com")
        assert store.users.find_unique("email", "ana@example.com") is None
        bia = make_user(store, "bia")
        store.users.update(bia.id, email="ana@example.com")

    def test_license_plate_is_unique(self, store: EntityStore):
        driver = make_user(store, "dan", UserType.DRIVER)
        plate = dict(model="Civic", year="2020", color="Black", license_plate="ABC-1234")
        store.vehicles.create(Vehicle(driver_id=driver.id, **plate))
        with pytest.raises(ConflictError):
            store.vehicles.create(Vehicle(driver_id=driver.id, **plate))


class TestCompareAndSwap:
    def test_swap_rejects_stale_record(self, store: EntityStore):
        ride = store.rides.create(ride_for(1))
        store.rides.update(ride.id, fare=12.0)
        with pytest.raises(ConflictError):
            store.rides.swap(ride, replace(ride, fare=99.0))
        assert store.rides.get(ride.id).fare == 12.0

    def test_swap_accepts_current_record(self, store: EntityStore):
        ride = store.rides.create(ride_for(1))
        stored = store.rides.swap(ride, replace(ride, fare=20.0))
        assert store.rides.get(ride.id) is stored


class TestParticipantIndex:
    def test_active_rides_are_indexed(self, store: EntityStore):
        ride = store.rides.create(ride_for(1))
        assert store.rides.active_ride_ids(1) == [ride.id]

    def test_terminal_ride_leaves_index(self, store: EntityStore):
        ride = store.rides.create(ride_for(1))
        store.rides.update(ride.id, status=RideStatus.CANCELLED)
        assert store.rides.active_ride_ids(1) == []

    def test_driver_added_on_update(self, store: EntityStore):
        ride = store.rides.create(ride_for(1))
        store.rides.update(ride.id, driver_id=5, status=RideStatus.ACCEPTED)
        assert store.rides.active_ride_ids(5) == [ride.id]
        assert store.rides.active_ride_ids(1) == [ride.id]
