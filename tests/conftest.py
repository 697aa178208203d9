"""
Shared test fixtures.

Every test gets its own ``EntityStore`` so no state leaks between tests.
The store clock is a ``FakeClock`` that ticks one second per reading,
which keeps timestamps strictly ordered and makes ordering assertions
deterministic.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ridehail.api.app import create_app
from ridehail.api.middleware import limiter
from ridehail.domain.entities import Ride, User
from ridehail.domain.enums import UserType
from ridehail.infrastructure.store import EntityStore
from ridehail.services.lifecycle import RideLifecycle


class FakeClock:
    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def make_user(store: EntityStore, username: str, user_type=UserType.PASSENGER) -> User:
    return store.users.create(
        User(
            username=username,
            password="not-a-real-hash",
            full_name=username.title(),
            email=f"{username}@example.com",
            user_type=user_type,
        )
    )


def ride_for(passenger_id: int, **overrides) -> Ride:
    fields = dict(
        passenger_id=passenger_id,
        origin_address="Rua Augusta, 100",
        destination_address="Shopping Ibirapuera",
        origin_lat=-23.5505,
        origin_lng=-46.6333,
        destination_lat=-23.6100,
        destination_lng=-46.6670,
    )
    fields.update(overrides)
    return Ride(**fields)


# ── Core fixtures ─────────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> EntityStore:
    return EntityStore(clock=clock)


@pytest.fixture
def lifecycle(store: EntityStore) -> RideLifecycle:
    return RideLifecycle(store)


@pytest.fixture
def passenger(store: EntityStore) -> User:
    return make_user(store, "paula")


@pytest.fixture
def passenger2(store: EntityStore) -> User:
    return make_user(store, "pedro")


@pytest.fixture
def driver(store: EntityStore) -> User:
    return make_user(store, "diego", UserType.DRIVER)


@pytest.fixture
def driver2(store: EntityStore) -> User:
    return make_user(store, "daniela", UserType.DRIVER)


# ── API fixtures ──────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by a fresh in-memory store."""
    limiter.reset()
    app = create_app(store=EntityStore(), seed=False)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
