"""
Fare Estimation  (Strategy Pattern)
===================================

Formula
-------
Fare = (Base_Fare + Distance x Rate_Per_KM) x Tier_Multiplier

* **Distance** is great-circle (haversine) distance; there is no routing
  engine behind this service, so road distance is approximated.
* **Duration** assumes a constant average speed, rounded up to whole minutes.
* **Tier_Multiplier**: economy 1.0, comfort 1.5, premium 2.0 (configurable).

Complexity: O(1) per estimate.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .entities import Location
from .enums import VehicleType

EARTH_RADIUS_KM = 6_371.0


def haversine_km(origin: Location, destination: Location) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1, lat2 = math.radians(origin.latitude), math.radians(destination.latitude)
    dlat = lat2 - lat1
    dlng = math.radians(destination.longitude - origin.longitude)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


# ── Strategy hierarchy ────────────────────────────────────────────────


class FareStrategy(ABC):
    @abstractmethod
    def calculate(self, distance_km: float, base_fare: float, rate_per_km: float) -> float: ...


class DistanceFare(FareStrategy):
    def calculate(self, distance_km: float, base_fare: float, rate_per_km: float) -> float:
        return base_fare + distance_km * rate_per_km


class TierFare(FareStrategy):
    """Distance fare scaled by the vehicle tier, rounded to one decimal."""

    def __init__(self, multiplier: float = 1.0):
        self.multiplier = multiplier

    def calculate(self, distance_km: float, base_fare: float, rate_per_km: float) -> float:
        raw = DistanceFare().calculate(distance_km, base_fare, rate_per_km)
        return round(raw * self.multiplier, 1)


# ── Estimator facade ──────────────────────────────────────────────────


@dataclass(frozen=True)
class FareEstimate:
    distance_km: float
    duration_minutes: int
    fare: float


class FareEstimator:
    """High-level API used by the ride handlers."""

    def __init__(
        self,
        base_fare: float = 10.0,
        rate_per_km: float = 2.0,
        average_speed_kmh: float = 30.0,
        tier_multipliers: dict[str, float] | None = None,
    ):
        self.base_fare = base_fare
        self.rate_per_km = rate_per_km
        self.average_speed_kmh = average_speed_kmh
        self.tier_multipliers = tier_multipliers or {t.value: 1.0 for t in VehicleType}

    @classmethod
    def from_settings(cls, settings) -> FareEstimator:
        return cls(
            base_fare=settings.base_fare,
            rate_per_km=settings.rate_per_km,
            average_speed_kmh=settings.average_speed_kmh,
            tier_multipliers=settings.tier_multipliers,
        )

    def multiplier_for(self, vehicle_type: VehicleType | str) -> float:
        key = VehicleType(vehicle_type).value
        return self.tier_multipliers.get(key, 1.0)

    def duration_minutes(self, distance_km: float) -> int:
        if distance_km <= 0:
            return 0
        return math.ceil(distance_km / self.average_speed_kmh * 60)

    def estimate(
        self,
        origin: Location,
        destination: Location,
        vehicle_type: VehicleType | str = VehicleType.ECONOMY,
    ) -> FareEstimate:
        distance = round(haversine_km(origin, destination), 1)
        strategy = TierFare(self.multiplier_for(vehicle_type))
        return FareEstimate(
            distance_km=distance,
            duration_minutes=self.duration_minutes(distance),
            fare=strategy.calculate(distance, self.base_fare, self.rate_per_km),
        )
