"""Post-ride ratings: the rater names the ride, the ratee is worked out."""

from __future__ import annotations

import logging
from typing import Optional

from ridehail.domain.entities import Rating
from ridehail.domain.errors import InvalidTransitionError, PermissionDeniedError
from ridehail.infrastructure.repositories import RatingRepository, RideRepository
from ridehail.infrastructure.store import EntityStore

logger = logging.getLogger(__name__)


class RatingService:
    def __init__(self, store: EntityStore):
        self.store = store
        self.rides = RideRepository(store)
        self.ratings = RatingRepository(store)

    def submit(
        self,
        ride_id: int,
        from_user_id: int,
        rating: int,
        comment: Optional[str] = None,
    ) -> Rating:
        """
        Record *from_user_id*'s score for the other participant of the ride.

        A passenger rates the driver and vice versa.  The score range is the
        request schema's job; repeated ratings for the same ride are kept.
        """
        ride = self.rides.require(ride_id)
        if not ride.involves(from_user_id):
            raise PermissionDeniedError(
                f"User {from_user_id} is not a participant of ride {ride_id}"
            )
        to_user_id = ride.counterpart_of(from_user_id)
        if to_user_id is None:
            raise InvalidTransitionError(ride.id, ["accepted"], ride.status.value)

        created = self.ratings.create(
            Rating(
                ride_id=ride.id,
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                rating=rating,
                comment=comment,
            )
        )
        logger.info(
            "Rating %d: user %d gave %d to user %d (ride %d)",
            created.id, from_user_id, rating, to_user_id, ride.id,
        )
        return created
