"""
User endpoints
==============

PATCH /api/v1/users/me               -- edit the caller's profile
PATCH /api/v1/users/me/status        -- go online / offline
GET   /api/v1/users/me/rides         -- the caller's ride history
GET   /api/v1/users/{user_id}/ratings -- ratings a user has received
"""

from fastapi import APIRouter, Depends, Query, Request

from ridehail.api.dependencies import get_accounts, get_current_user, get_store
from ridehail.api.middleware import limiter
from ridehail.api.schemas import (
    ProfileUpdateRequest,
    RatingResponse,
    RideResponse,
    StatusUpdateRequest,
    UserResponse,
)
from ridehail.config import settings
from ridehail.domain.entities import User
from ridehail.infrastructure.repositories import (
    RatingRepository,
    RideRepository,
    UserRepository,
)
from ridehail.infrastructure.store import EntityStore
from ridehail.services.accounts import AccountService

router = APIRouter(prefix="/users", tags=["users"])


@router.patch("/me", response_model=UserResponse, summary="Update profile")
@limiter.limit(settings.rate_limit)
async def update_profile(
    request: Request,
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_accounts),
):
    return accounts.update_profile(user.id, **body.model_dump(exclude_unset=True))


@router.patch("/me/status", response_model=UserResponse, summary="Set online status")
@limiter.limit(settings.rate_limit)
async def update_status(
    request: Request,
    body: StatusUpdateRequest,
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return UserRepository(store).set_online(user.id, body.is_online)


@router.get(
    "/me/rides",
    response_model=list[RideResponse],
    summary="Ride history, most recent first",
)
@limiter.limit(settings.rate_limit)
async def ride_history(
    request: Request,
    limit: int = Query(settings.default_history_limit, ge=1, le=100),
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return RideRepository(store).history_for_user(user.id, limit=limit)


@router.get(
    "/{user_id}/ratings",
    response_model=list[RatingResponse],
    summary="Ratings received by a user, newest first",
)
@limiter.limit(settings.rate_limit)
async def user_ratings(
    request: Request,
    user_id: int,
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    UserRepository(store).require(user_id)
    return RatingRepository(store).received_by(user_id)
