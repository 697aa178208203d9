"""
Rating endpoints
================

POST /api/v1/ratings             -- rate the other participant of a ride
GET  /api/v1/ratings/{rating_id} -- rating details
"""

from fastapi import APIRouter, Depends, Request

from ridehail.api.dependencies import get_current_user, get_rating_service, get_store
from ridehail.api.middleware import limiter
from ridehail.api.schemas import RatingCreateRequest, RatingResponse
from ridehail.config import settings
from ridehail.domain.entities import User
from ridehail.infrastructure.repositories import RatingRepository
from ridehail.infrastructure.store import EntityStore
from ridehail.services.ratings import RatingService

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post(
    "",
    status_code=201,
    response_model=RatingResponse,
    summary="Submit a rating",
    description=(
        "The rated user is the caller's counterpart on the ride: a passenger "
        "rates the driver, a driver rates the passenger."
    ),
)
@limiter.limit(settings.rate_limit)
async def create_rating(
    request: Request,
    body: RatingCreateRequest,
    user: User = Depends(get_current_user),
    ratings: RatingService = Depends(get_rating_service),
):
    return ratings.submit(body.ride_id, user.id, body.rating, body.comment)


@router.get("/{rating_id}", response_model=RatingResponse, summary="Get a rating")
@limiter.limit(settings.rate_limit)
async def get_rating(
    request: Request,
    rating_id: int,
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return RatingRepository(store).require(rating_id)
