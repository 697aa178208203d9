"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Ride Hailing Coordination API"
    log_level: str = "INFO"

    # Auth (bearer tokens issued on login)
    jwt_secret: str = "ridehail-dev-secret"
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24

    # Rate limiting, applied per client address
    rate_limit: str = "100/minute"

    # Queries
    default_history_limit: int = 10

    # Fare estimation
    base_fare: float = 10.0
    rate_per_km: float = 2.0
    average_speed_kmh: float = 30.0
    tier_multipliers: dict[str, float] = {
        "economy": 1.0,
        "comfort": 1.5,
        "premium": 2.0,
    }

    # Demo passenger "test" / "password" created at startup
    seed_demo_data: bool = True

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
