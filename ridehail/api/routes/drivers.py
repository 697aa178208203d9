"""
Driver dashboard endpoints
==========================

GET /api/v1/drivers/vehicle      -- the calling driver's vehicle
GET /api/v1/drivers/rides/recent -- the driver's latest rides
GET /api/v1/drivers/stats        -- rides and earnings today, average rating
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ridehail.api.dependencies import get_accounts, get_store, require_driver
from ridehail.api.middleware import limiter
from ridehail.api.schemas import DriverStatsResponse, RideResponse, VehicleResponse
from ridehail.config import settings
from ridehail.domain.entities import User
from ridehail.infrastructure.repositories import RideRepository, VehicleRepository
from ridehail.infrastructure.store import EntityStore
from ridehail.services.accounts import AccountService

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.get("/vehicle", response_model=VehicleResponse, summary="Driver's vehicle")
@limiter.limit(settings.rate_limit)
async def driver_vehicle(
    request: Request,
    driver: User = Depends(require_driver),
    store: EntityStore = Depends(get_store),
):
    vehicle = VehicleRepository(store).get_by_driver(driver.id)
    if vehicle is None:
        raise HTTPException(status_code=404, detail="No vehicle registered")
    return vehicle


@router.get(
    "/rides/recent", response_model=list[RideResponse], summary="Recent rides"
)
@limiter.limit(settings.rate_limit)
async def recent_rides(
    request: Request,
    limit: int = Query(settings.default_history_limit, ge=1, le=100),
    driver: User = Depends(require_driver),
    store: EntityStore = Depends(get_store),
):
    return RideRepository(store).history_for_user(driver.id, limit=limit)


@router.get("/stats", response_model=DriverStatsResponse, summary="Today's figures")
@limiter.limit(settings.rate_limit)
async def driver_stats(
    request: Request,
    driver: User = Depends(require_driver),
    accounts: AccountService = Depends(get_accounts),
):
    return accounts.driver_stats(driver.id)
