"""
Vehicle endpoints
=================

POST  /api/v1/vehicles              -- register the calling driver's vehicle
GET   /api/v1/vehicles/{vehicle_id} -- vehicle details
PATCH /api/v1/vehicles/{vehicle_id} -- owner edits the vehicle
"""

from fastapi import APIRouter, Depends, Request

from ridehail.api.dependencies import get_current_user, get_store, require_driver
from ridehail.api.middleware import limiter
from ridehail.api.schemas import VehicleCreateRequest, VehicleResponse, VehicleUpdateRequest
from ridehail.config import settings
from ridehail.domain.entities import User, Vehicle
from ridehail.domain.errors import PermissionDeniedError
from ridehail.infrastructure.repositories import VehicleRepository
from ridehail.infrastructure.store import EntityStore

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.post(
    "",
    status_code=201,
    response_model=VehicleResponse,
    summary="Register a vehicle",
    responses={409: {"description": "License plate already registered."}},
)
@limiter.limit(settings.rate_limit)
async def create_vehicle(
    request: Request,
    body: VehicleCreateRequest,
    driver: User = Depends(require_driver),
    store: EntityStore = Depends(get_store),
):
    return VehicleRepository(store).create(Vehicle(driver_id=driver.id, **body.model_dump()))


@router.get("/{vehicle_id}", response_model=VehicleResponse, summary="Get a vehicle")
@limiter.limit(settings.rate_limit)
async def get_vehicle(
    request: Request,
    vehicle_id: int,
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return VehicleRepository(store).require(vehicle_id)


@router.patch("/{vehicle_id}", response_model=VehicleResponse, summary="Update a vehicle")
@limiter.limit(settings.rate_limit)
async def update_vehicle(
    request: Request,
    vehicle_id: int,
    body: VehicleUpdateRequest,
    driver: User = Depends(require_driver),
    store: EntityStore = Depends(get_store),
):
    repo = VehicleRepository(store)
    if repo.require(vehicle_id).driver_id != driver.id:
        raise PermissionDeniedError("Only the owning driver may edit this vehicle")
    return repo.update(vehicle_id, **body.model_dump(exclude_unset=True))
