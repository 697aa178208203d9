"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses.
# Declining a request is a move to CANCELLED.
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.REQUESTED: {RideStatus.ACCEPTED, RideStatus.CANCELLED},
    RideStatus.ACCEPTED: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}

# A passenger is busy from request until the ride ends ...
ACTIVE_STATUSES: frozenset[RideStatus] = frozenset(
    {RideStatus.REQUESTED, RideStatus.ACCEPTED, RideStatus.IN_PROGRESS}
)
# ... a driver only once they have accepted.
DRIVER_ACTIVE_STATUSES: frozenset[RideStatus] = frozenset(
    {RideStatus.ACCEPTED, RideStatus.IN_PROGRESS}
)
TERMINAL_STATUSES: frozenset[RideStatus] = frozenset(
    {RideStatus.COMPLETED, RideStatus.CANCELLED}
)

# Which timestamp field each status stamps when entered.
STATUS_TIMESTAMP_FIELDS: dict[RideStatus, str] = {
    RideStatus.REQUESTED: "requested_at",
    RideStatus.ACCEPTED: "accepted_at",
    RideStatus.IN_PROGRESS: "started_at",
    RideStatus.COMPLETED: "completed_at",
    RideStatus.CANCELLED: "cancelled_at",
}


class UserType(str, enum.Enum):
    PASSENGER = "passenger"
    DRIVER = "driver"


class VehicleType(str, enum.Enum):
    ECONOMY = "economy"
    COMFORT = "comfort"
    PREMIUM = "premium"
