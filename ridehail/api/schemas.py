"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ridehail.domain.enums import RideStatus, UserType, VehicleType
from ridehail.services.accounts import MAX_PASSWORD_BYTES, password_too_long


def _check_password_length(value: str) -> str:
    if password_too_long(value):
        raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return value


def _reject_null(value):
    # Omit a field to leave it unchanged; null would blank a required value.
    if value is None:
        raise ValueError("Field cannot be null")
    return value


# ── Requests ──────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=6)
    confirm_password: str
    full_name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    profile_picture: Optional[str] = None
    user_type: UserType = UserType.PASSENGER
    language: str = Field("pt", max_length=8)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_length(value)

    @model_validator(mode="after")
    def passwords_match(self) -> RegisterRequest:
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_length(value)


class ProfileUpdateRequest(BaseModel):
    """Partial update; ``phone`` and ``profile_picture`` may be cleared with null."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[str] = Field(
        None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255
    )
    phone: Optional[str] = Field(None, max_length=32)
    profile_picture: Optional[str] = None
    language: Optional[str] = Field(None, max_length=8)

    @field_validator("full_name", "email", "language")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        return _reject_null(value)


class StatusUpdateRequest(BaseModel):
    is_online: bool


class VehicleCreateRequest(BaseModel):
    model: str = Field(..., min_length=1, max_length=80)
    year: str = Field(..., pattern=r"^\d{4}$")
    color: str = Field(..., min_length=1, max_length=40)
    license_plate: str = Field(..., min_length=1, max_length=16)
    vehicle_type: VehicleType = VehicleType.ECONOMY


class VehicleUpdateRequest(BaseModel):
    model: Optional[str] = Field(None, min_length=1, max_length=80)
    year: Optional[str] = Field(None, pattern=r"^\d{4}$")
    color: Optional[str] = Field(None, min_length=1, max_length=40)
    license_plate: Optional[str] = Field(None, min_length=1, max_length=16)
    vehicle_type: Optional[VehicleType] = None

    @field_validator("model", "year", "color", "license_plate", "vehicle_type")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class RideCreateRequest(BaseModel):
    origin_address: str = Field(..., min_length=1)
    destination_address: str = Field(..., min_length=1)
    origin_lat: Optional[float] = Field(None, ge=-90, le=90)
    origin_lng: Optional[float] = Field(None, ge=-180, le=180)
    destination_lat: Optional[float] = Field(None, ge=-90, le=90)
    destination_lng: Optional[float] = Field(None, ge=-180, le=180)
    distance: Optional[float] = Field(None, ge=0, description="Kilometres.")
    duration: Optional[int] = Field(None, ge=0, description="Minutes.")
    fare: Optional[float] = Field(None, ge=0)
    vehicle_type: VehicleType = VehicleType.ECONOMY
    payment_method: str = Field("credit_card", max_length=32)


class RatingCreateRequest(BaseModel):
    ride_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)


# ── Responses ─────────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: int
    username: str
    full_name: str
    email: str
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    user_type: UserType
    language: str
    is_online: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class VehicleResponse(BaseModel):
    id: int
    driver_id: int
    model: str
    year: str
    color: str
    license_plate: str
    vehicle_type: VehicleType

    model_config = {"from_attributes": True}


class RideResponse(BaseModel):
    id: int
    passenger_id: Optional[int] = None
    driver_id: Optional[int] = None
    origin_address: str
    destination_address: str
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    status: RideStatus
    requested_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    distance: Optional[float] = None
    duration: Optional[int] = None
    fare: Optional[float] = None
    vehicle_type: VehicleType
    payment_method: str

    model_config = {"from_attributes": True}


class FareEstimateResponse(BaseModel):
    distance_km: float
    duration_minutes: int
    fare: float
    vehicle_type: VehicleType


class RatingResponse(BaseModel):
    id: int
    ride_id: int
    from_user_id: int
    to_user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DriverStatsResponse(BaseModel):
    today_rides: int
    today_earnings: float
    rating: Optional[float] = None


class StoreSummaryResponse(BaseModel):
    users: int
    vehicles: int
    ratings: int
    rides_by_status: dict[str, int]


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
