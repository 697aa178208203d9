"""
FastAPI application factory.

* Builds the in-memory ``EntityStore`` (or takes one injected by tests)
  and hangs it on ``app.state``; every request handler reaches it through
  ``dependencies.get_store``.
* Seeds demo data via lifespan events when enabled.
* Maps the core error taxonomy onto HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridehail.api.middleware import limiter
from ridehail.api.routes import admin, auth, drivers, ratings, rides, users, vehicles
from ridehail.config import settings
from ridehail.domain.errors import (
    AlreadyActiveError,
    AuthenticationError,
    ConflictError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    RideHailError,
)
from ridehail.infrastructure.seed import seed_demo_data
from ridehail.infrastructure.store import EntityStore

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[RideHailError], int] = {
    NotFoundError: 404,
    InvalidTransitionError: 409,
    AlreadyActiveError: 409,
    ConflictError: 409,
    PermissionDeniedError: 403,
    AuthenticationError: 401,
    InvalidInputError: 422,
}


async def ridehail_error_handler(request: Request, exc: RideHailError) -> JSONResponse:
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400
    )
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content={"detail": exc.detail}, headers=headers)


def create_app(store: Optional[EntityStore] = None, seed: Optional[bool] = None) -> FastAPI:
    store = store if store is not None else EntityStore()
    seed = settings.seed_demo_data if seed is None else seed

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Seed demo data on startup."""
        if seed:
            seed_demo_data(app.state.store)
        logger.info("Ride service started")
        yield
        logger.info("Ride service stopped")

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Coordinates passengers, drivers and vehicles through the ride "
            "lifecycle: request, accept or decline, arrival, start, "
            "completion, cancellation and post-ride ratings."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(RideHailError, ridehail_error_handler)

    # Routers
    for module in (auth, users, vehicles, drivers, rides, ratings, admin):
        app.include_router(module.router, prefix="/api/v1")

    return app
