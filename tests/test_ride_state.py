"""Unit tests for ride entity state transitions (State Pattern)."""

from datetime import datetime, timezone

import pytest

from ridehail.domain.entities import Ride
from ridehail.domain.enums import RideStatus
from ridehail.domain.errors import InvalidTransitionError

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _ride(status: RideStatus) -> Ride:
    return Ride(id=1, origin_address="A", destination_address="B", status=status)


class TestRideStateMachine:
    def test_initial_status_is_requested(self):
        ride = Ride(origin_address="A", destination_address="B")
        assert ride.status == RideStatus.REQUESTED
        assert ride.driver_id is None

    # ── Valid transitions ─────────────────────────────────────────

    def test_requested_to_accepted_sets_driver(self):
        ride = _ride(RideStatus.REQUESTED).advance(RideStatus.ACCEPTED, NOW, driver_id=7)
        assert ride.status == RideStatus.ACCEPTED
        assert ride.driver_id == 7
        assert ride.accepted_at == NOW

    def test_requested_to_cancelled(self):
        ride = _ride(RideStatus.REQUESTED).advance(RideStatus.CANCELLED, NOW)
        assert ride.status == RideStatus.CANCELLED
        assert ride.cancelled_at == NOW

    def test_accepted_to_in_progress(self):
        ride = _ride(RideStatus.ACCEPTED).advance(RideStatus.IN_PROGRESS, NOW)
        assert ride.status == RideStatus.IN_PROGRESS
        assert ride.started_at == NOW

    def test_in_progress_to_completed(self):
        ride = _ride(RideStatus.IN_PROGRESS).advance(RideStatus.COMPLETED, NOW)
        assert ride.status == RideStatus.COMPLETED
        assert ride.completed_at == NOW

    def test_in_progress_can_be_cancelled(self):
        ride = _ride(RideStatus.IN_PROGRESS).advance(RideStatus.CANCELLED, NOW)
        assert ride.status == RideStatus.CANCELLED

    def test_advance_returns_copy(self):
        original = _ride(RideStatus.REQUESTED)
        original.advance(RideStatus.ACCEPTED, NOW, driver_id=7)
        assert original.status == RideStatus.REQUESTED
        assert original.accepted_at is None

    # ── Invalid transitions ───────────────────────────────────────

    def test_requested_to_completed_fails(self):
        with pytest.raises(InvalidTransitionError) as exc:
            _ride(RideStatus.REQUESTED).advance(RideStatus.COMPLETED, NOW)
        assert exc.value.required == ("in_progress",)
        assert exc.value.actual == "requested"

    @pytest.mark.parametrize("terminal", [RideStatus.COMPLETED, RideStatus.CANCELLED])
    def test_terminal_statuses_are_final(self, terminal):
        for target in RideStatus:
            with pytest.raises(InvalidTransitionError):
                _ride(terminal).advance(target, NOW)

    def test_error_names_required_and_actual(self):
        with pytest.raises(InvalidTransitionError, match="must be accepted, but is requested"):
            _ride(RideStatus.REQUESTED).advance(RideStatus.IN_PROGRESS, NOW)


class TestRideHelpers:
    def test_counterpart(self):
        ride = Ride(origin_address="A", destination_address="B", passenger_id=1, driver_id=2)
        assert ride.counterpart_of(1) == 2
        assert ride.counterpart_of(2) == 1
        assert ride.counterpart_of(3) is None

    def test_origin_requires_both_coordinates(self):
        ride = Ride(origin_address="A", destination_address="B", origin_lat=1.0)
        assert ride.origin is None
