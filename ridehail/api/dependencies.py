"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ridehail.domain.entities import User
from ridehail.domain.errors import AuthenticationError, PermissionDeniedError
from ridehail.infrastructure.store import EntityStore
from ridehail.services.accounts import AccountService
from ridehail.services.lifecycle import RideLifecycle
from ridehail.services.ratings import RatingService

_bearer = HTTPBearer(auto_error=False)


def get_store(request: Request) -> EntityStore:
    """The process-wide store built by the application factory."""
    return request.app.state.store


def get_lifecycle(store: EntityStore = Depends(get_store)) -> RideLifecycle:
    return RideLifecycle(store)


def get_accounts(store: EntityStore = Depends(get_store)) -> AccountService:
    return AccountService(store)


def get_rating_service(store: EntityStore = Depends(get_store)) -> RatingService:
    return RatingService(store)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    accounts: AccountService = Depends(get_accounts),
) -> User:
    """Resolve the bearer token to a user, or fail with 401."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return accounts.resolve_token(credentials.credentials)


def require_driver(user: User = Depends(get_current_user)) -> User:
    if not user.is_driver:
        raise PermissionDeniedError("Driver account required")
    return user
