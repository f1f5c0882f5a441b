from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from decimal import Decimal
from typing import List, Optional


class Settings(BaseSettings):
    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Database - PostgreSQL for production, SQLite for development
    database_url: str = Field(
        default="sqlite:///./rental_pricing.db",
        alias="DATABASE_URL"
    )

    # Security - tokens are issued by the auth service, we only verify them
    secret_key: str = Field(default="dev-secret-key-at-least-32-characters-long-for-development", alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")

    # CORS - Frontend URLs from environment (comma-separated)
    allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
        alias="ALLOWED_ORIGINS"
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # ==============================================
    # Pricing & Availability
    # ==============================================
    # Single property-defined currency (no conversion)
    default_currency: str = Field(default="AED", alias="DEFAULT_CURRENCY")

    # Weekend days (Monday=0, Sunday=6). Default: Friday/Saturday
    weekend_days: str = Field(default="4,5", alias="WEEKEND_DAYS")

    # Half-day price used when an override omits one: full_day * ratio
    half_day_ratio: Decimal = Field(default=Decimal("0.7"), alias="HALF_DAY_RATIO")

    # Upper bound for any stored price
    max_price: Decimal = Field(default=Decimal("99999.99"), alias="MAX_PRICE")

    # Bulk payload and range ceilings
    max_bulk_items: int = Field(default=365, alias="MAX_BULK_ITEMS")
    max_range_days: int = Field(default=365, alias="MAX_RANGE_DAYS")
    public_calendar_max_days: int = Field(default=90, alias="PUBLIC_CALENDAR_MAX_DAYS")

    # Rate limiting (slowapi). REDIS_URL switches storage from memory to redis
    public_calendar_rate_limit: str = Field(default="60/minute", alias="PUBLIC_CALENDAR_RATE_LIMIT")
    default_rate_limit: str = Field(default="100/minute", alias="DEFAULT_RATE_LIMIT")
    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")

    @field_validator('half_day_ratio')
    @classmethod
    def validate_half_day_ratio(cls, v: Decimal) -> Decimal:
        if v <= 0 or v > 1:
            raise ValueError("HALF_DAY_RATIO must be in (0, 1]")
        return v

    @field_validator('weekend_days')
    @classmethod
    def validate_weekend_days(cls, v: str) -> str:
        for d in v.split(","):
            if d.strip() and (not d.strip().isdigit() or int(d.strip()) not in range(7)):
                raise ValueError("WEEKEND_DAYS values must be 0-6")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> List[str]:
        """
        Parse allowed origins from comma-separated string.
        Returns a list suitable for CORSMiddleware.
        """
        if not self.allowed_origins:
            return ["http://localhost:5173"]

        # Remove trailing slashes and duplicates while preserving order
        seen = set()
        unique_origins = []
        for origin in self.allowed_origins.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in seen:
                seen.add(origin)
                unique_origins.append(origin)

        return unique_origins or ["http://localhost:5173"]

    @property
    def weekend_day_numbers(self) -> List[int]:
        """
        Parse weekend days into list of weekday numbers.
        Default: [4, 5] (Friday, Saturday)
        """
        return [int(d.strip()) for d in self.weekend_days.split(",") if d.strip()]

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Initialize settings on module load
settings = get_settings()
