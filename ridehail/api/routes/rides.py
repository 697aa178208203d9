"""
Ride endpoints
==============

GET   /api/v1/rides/active              -- the caller's non-terminal ride
GET   /api/v1/rides/estimate            -- distance, duration and fare quote
POST  /api/v1/rides                     -- request a ride (passenger)
GET   /api/v1/rides/{ride_id}           -- ride details
PATCH /api/v1/rides/{ride_id}/accept    -- driver takes the request
PATCH /api/v1/rides/{ride_id}/decline   -- driver turns the request down
PATCH /api/v1/rides/{ride_id}/arrived   -- assigned driver is at pickup
PATCH /api/v1/rides/{ride_id}/start     -- assigned driver starts the trip
PATCH /api/v1/rides/{ride_id}/complete  -- assigned driver ends the trip
PATCH /api/v1/rides/{ride_id}/cancel    -- either participant cancels
"""

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ridehail.api.dependencies import (
    get_current_user,
    get_lifecycle,
    get_store,
    require_driver,
)
from ridehail.api.middleware import limiter
from ridehail.api.schemas import FareEstimateResponse, RideCreateRequest, RideResponse
from ridehail.config import settings
from ridehail.domain.entities import Location, Ride, User
from ridehail.domain.enums import RideStatus, VehicleType
from ridehail.domain.errors import PermissionDeniedError
from ridehail.domain.pricing import FareEstimator
from ridehail.infrastructure.repositories import RideRepository
from ridehail.infrastructure.store import EntityStore
from ridehail.services.lifecycle import RideLifecycle

router = APIRouter(prefix="/rides", tags=["rides"])


@router.get(
    "/active",
    response_model=RideResponse,
    summary="Get the caller's active ride",
    responses={404: {"description": "No active ride."}},
)
@limiter.limit(settings.rate_limit)
async def get_active_ride(
    request: Request,
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    ride = RideRepository(store).active_for_user(user.id)
    if ride is None:
        raise HTTPException(status_code=404, detail="No active ride found")
    return ride


@router.get(
    "/estimate",
    response_model=FareEstimateResponse,
    summary="Estimate distance, duration and fare for a trip",
)
@limiter.limit(settings.rate_limit)
async def estimate_fare(
    request: Request,
    origin_lat: float = Query(..., ge=-90, le=90),
    origin_lng: float = Query(..., ge=-180, le=180),
    destination_lat: float = Query(..., ge=-90, le=90),
    destination_lng: float = Query(..., ge=-180, le=180),
    vehicle_type: VehicleType = VehicleType.ECONOMY,
):
    estimate = FareEstimator.from_settings(settings).estimate(
        Location(origin_lat, origin_lng),
        Location(destination_lat, destination_lng),
        vehicle_type,
    )
    return FareEstimateResponse(
        distance_km=estimate.distance_km,
        duration_minutes=estimate.duration_minutes,
        fare=estimate.fare,
        vehicle_type=vehicle_type,
    )


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Request a ride",
    responses={409: {"description": "The passenger already has an active ride."}},
)
@limiter.limit(settings.rate_limit)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    user: User = Depends(get_current_user),
    lifecycle: RideLifecycle = Depends(get_lifecycle),
):
    ride = Ride(passenger_id=user.id, **body.model_dump())

    # ── Fill the quote when the client did not send one ───────────
    if ride.origin and ride.destination and None in (ride.distance, ride.duration, ride.fare):
        estimate = FareEstimator.from_settings(settings).estimate(
            ride.origin, ride.destination, ride.vehicle_type
        )
        ride = replace(
            ride,
            distance=estimate.distance_km if ride.distance is None else ride.distance,
            duration=estimate.duration_minutes if ride.duration is None else ride.duration,
            fare=estimate.fare if ride.fare is None else ride.fare,
        )

    return lifecycle.create_ride(ride)


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get a ride",
    description=(
        "Visible to the ride's participants, and to any driver while the "
        "ride is still ``requested``."
    ),
    responses={403: {"description": "Caller may not view this ride."}},
)
@limiter.limit(settings.rate_limit)
async def get_ride(
    request: Request,
    ride_id: int,
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    ride = RideRepository(store).require(ride_id)
    open_offer = user.is_driver and ride.status == RideStatus.REQUESTED
    if not (ride.involves(user.id) or open_offer):
        raise PermissionDeniedError(
            f"User {user.id} is not a participant of ride {ride.id}"
        )
    return ride


@router.patch(
    "/{ride_id}/accept",
    response_model=RideResponse,
    summary="Accept a requested ride",
    description=(
        "Assigns the calling driver to a ``requested`` ride. Fails with 409 "
        "if the ride is no longer requested or the driver is mid-ride."
    ),
)
@limiter.limit(settings.rate_limit)
async def accept_ride(
    request: Request,
    ride_id: int,
    driver: User = Depends(require_driver),
    lifecycle: RideLifecycle = Depends(get_lifecycle),
):
    return lifecycle.accept_ride(ride_id, driver.id)


@router.patch(
    "/{ride_id}/decline",
    response_model=RideResponse,
    summary="Decline a requested ride",
)
@limiter.limit(settings.rate_limit)
async def decline_ride(
    request: Request,
    ride_id: int,
    driver: User = Depends(require_driver),
    lifecycle: RideLifecycle = Depends(get_lifecycle),
):
    return lifecycle.decline_ride(ride_id)


@router.patch(
    "/{ride_id}/arrived",
    response_model=RideResponse,
    summary="Signal arrival at the pickup point",
    description="Notification only: the ride stays ``accepted``.",
)
@limiter.limit(settings.rate_limit)
async def mark_arrived(
    request: Request,
    ride_id: int,
    driver: User = Depends(require_driver),
    lifecycle: RideLifecycle = Depends(get_lifecycle),
):
    return lifecycle.mark_driver_arrived(ride_id, acting_driver_id=driver.id)


@router.patch("/{ride_id}/start", response_model=RideResponse, summary="Start the trip")
@limiter.limit(settings.rate_limit)
async def start_ride(
    request: Request,
    ride_id: int,
    driver: User = Depends(require_driver),
    lifecycle: RideLifecycle = Depends(get_lifecycle),
):
    return lifecycle.start_ride(ride_id, acting_driver_id=driver.id)


@router.patch(
    "/{ride_id}/complete", response_model=RideResponse, summary="Complete the trip"
)
@limiter.limit(settings.rate_limit)
async def complete_ride(
    request: Request,
    ride_id: int,
    driver: User = Depends(require_driver),
    lifecycle: RideLifecycle = Depends(get_lifecycle),
):
    return lifecycle.complete_ride(ride_id, acting_driver_id=driver.id)


@router.patch(
    "/{ride_id}/cancel",
    response_model=RideResponse,
    summary="Cancel a ride",
    description=(
        "Either participant may cancel while the ride is requested, "
        "accepted or in progress."
    ),
)
@limiter.limit(settings.rate_limit)
async def cancel_ride(
    request: Request,
    ride_id: int,
    user: User = Depends(get_current_user),
    lifecycle: RideLifecycle = Depends(get_lifecycle),
):
    return lifecycle.cancel_ride(ride_id, acting_user_id=user.id)
