"""
Demo data for a freshly started process.

The store lives in memory only, so seeding happens at startup (see the
app lifespan) rather than as a one-off script.  Creates the demo passenger
``test`` / ``password`` used by the web client's login screen.
"""

from __future__ import annotations

import logging

from ridehail.domain.enums import UserType
from ridehail.infrastructure.store import EntityStore
from ridehail.services.accounts import AccountService

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {
        "username": "test",
        "password": "password",
        "full_name": "Test User",
        "email": "test@example.com",
        "phone": "555-1234",
        "profile_picture": "",
        "user_type": UserType.PASSENGER,
        "language": "pt",
    },
]


def seed_demo_data(store: EntityStore) -> int:
    """Register the demo users that are missing.  Returns how many were added."""
    accounts = AccountService(store)
    added = 0
    for data in DEMO_USERS:
        if accounts.users.get_by_username(data["username"]) is not None:
            continue
        accounts.register(**data)
        added += 1
    logger.info("Seeded %d demo user(s)", added)
    return added
