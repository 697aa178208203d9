"""
Accounts: registration, credential checks, bearer tokens and the driver
dashboard figures.

Passwords are hashed with bcrypt; tokens are HS256 JWTs carrying the
user id and role.  The ride core only ever sees the resolved user id and
role, never the token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
import jwt

from ridehail.config import settings
from ridehail.domain.entities import User
from ridehail.domain.enums import UserType
from ridehail.domain.errors import AuthenticationError, InvalidInputError
from ridehail.infrastructure.repositories import (
    RatingRepository,
    RideRepository,
    UserRepository,
)
from ridehail.infrastructure.store import EntityStore

logger = logging.getLogger(__name__)

# Fields a user may change on their own profile.
PROFILE_FIELDS = frozenset(
    {"full_name", "email", "phone", "profile_picture", "language", "is_online"}
)
REQUIRED_PROFILE_FIELDS = frozenset({"full_name", "email", "language", "is_online"})

# bcrypt reads at most 72 bytes; bcrypt>=5 rejects anything longer.
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    if password_too_long(password):
        raise InvalidInputError(
            f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes"
        )
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not hashed or password_too_long(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.error("Stored password hash is malformed")
        return False


@dataclass(frozen=True)
class DriverStats:
    today_rides: int
    today_earnings: float
    rating: Optional[float]


class AccountService:
    def __init__(self, store: EntityStore):
        self.store = store
        self.users = UserRepository(store)

    def register(
        self,
        *,
        username: str,
        password: str,
        full_name: str,
        email: str,
        phone: Optional[str] = None,
        profile_picture: Optional[str] = None,
        user_type: UserType = UserType.PASSENGER,
        language: str = "pt",
    ) -> User:
        """Create a user; username and email must be unused."""
        user = self.users.create(
            User(
                username=username,
                password=hash_password(password),
                full_name=full_name,
                email=normalize_email(email),
                phone=phone,
                profile_picture=profile_picture,
                user_type=UserType(user_type),
                language=language,
            )
        )
        logger.info("Registered %s %d (%s)", user.user_type.value, user.id, username)
        return user

    def authenticate(self, username: str, password: str) -> User:
        user = self.users.get_by_username(username)
        if user is None or not verify_password(password, user.password):
            raise AuthenticationError("Invalid username or password")
        return user

    def update_profile(self, user_id: int, **changes: Any) -> User:
        allowed = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        missing = sorted(
            k for k in REQUIRED_PROFILE_FIELDS if k in allowed and allowed[k] is None
        )
        if missing:
            raise InvalidInputError(f"{', '.join(missing)} cannot be null")
        if "email" in allowed:
            allowed["email"] = normalize_email(allowed["email"])
        return self.users.update(user_id, **allowed)

    # ── tokens ────────────────────────────────────────────────────────

    @staticmethod
    def issue_token(user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user.id,
            "user_type": user.user_type.value,
            "iat": now,
            "exp": now + timedelta(hours=settings.jwt_expiration_hours),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    def resolve_token(self, token: str) -> User:
        try:
            payload = jwt.decode(
                token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
            )
        except jwt.PyJWTError as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc

        user_id = payload.get("user_id")
        user = self.users.get_by_id(user_id) if isinstance(user_id, int) else None
        if user is None:
            raise AuthenticationError("Token does not match a known user")
        return user

    # ── dashboard ─────────────────────────────────────────────────────

    def driver_stats(self, driver_id: int) -> DriverStats:
        now = self.store.now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        rides = RideRepository(self.store).completed_by_driver_since(driver_id, midnight)
        return DriverStats(
            today_rides=len(rides),
            today_earnings=round(sum(r.fare or 0.0 for r in rides), 2),
            rating=RatingRepository(self.store).average_for(driver_id),
        )
