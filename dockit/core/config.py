"""
Configuration Management

Centralized configuration management using Pydantic Settings for type safety
and environment variable integration.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    case_sensitive=True,
    extra="ignore",
)


class Environment(str, Enum):
    """Application environment types."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


class DatabaseSettings(BaseSettings):
    """Database configuration settings"""

    model_config = _ENV_CONFIG

    DATABASE_URL: str = Field(default="sqlite:///./dockit.db")
    DATABASE_ECHO: bool = Field(default=False)

    # Connection pool settings (ignored for SQLite)
    DB_POOL_SIZE: int = Field(default=10, ge=1)
    DB_MAX_OVERFLOW: int = Field(default=20, ge=0)
    DB_POOL_TIMEOUT: int = Field(default=30, ge=1)
    DB_POOL_RECYCLE: int = Field(default=3600, ge=60)


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""

    model_config = _ENV_CONFIG

    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_FORMAT: str = Field(default="text")
    LOG_FILE: Optional[str] = Field(default=None)
    ENABLE_STRUCTURED_LOGGING: bool = Field(default=True)
    LOG_SQL_QUERIES: bool = Field(default=False)

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v


class LicensingSettings(BaseSettings):
    """Vendor licence and station premium settings"""

    model_config = _ENV_CONFIG

    TRIAL_PERIOD_DAYS: int = Field(default=7, ge=1)
    TRIAL_MAX_STATIONS: int = Field(default=5, ge=1)
    YEARLY_MAX_STATIONS: int = Field(default=50, ge=1)
    YEARLY_PERIOD_DAYS: int = Field(default=365, ge=1)
    EXPIRY_WARNING_DAYS: int = Field(default=7, ge=1)

    PREMIUM_MONTHLY_DAYS: int = Field(default=30, ge=1)
    PREMIUM_YEARLY_DAYS: int = Field(default=365, ge=1)

    # Extension arithmetic is a calendar-day approximation
    DAYS_PER_MONTH: int = Field(default=30, ge=1)
    DAYS_PER_YEAR: int = Field(default=365, ge=1)

    VENDOR_YEARLY_PRICE: Decimal = Field(default=Decimal("12000"))
    PREMIUM_MONTHLY_PRICE: Decimal = Field(default=Decimal("1000"))
    PREMIUM_YEARLY_PRICE: Decimal = Field(default=Decimal("9999"))
    VAT_RATE: Decimal = Field(default=Decimal("0.13"), ge=0, le=1)
    CURRENCY: str = Field(default="NPR", min_length=3, max_length=3)


class SettlementSettings(BaseSettings):
    """Settlement ledger settings"""

    model_config = _ENV_CONFIG

    PLATFORM_FEE: Decimal = Field(default=Decimal("5"), ge=0)
    AMOUNT_TOLERANCE: Decimal = Field(default=Decimal("0.01"), ge=0)
    PAYMENT_REFERENCE_MIN_LENGTH: int = Field(default=3, ge=1)


class RefundSettings(BaseSettings):
    """Refund policy settings"""

    model_config = _ENV_CONFIG

    MINIMUM_HOURS_BEFORE_CHARGE: Decimal = Field(default=Decimal("6"), ge=0)
    SLOT_OCCUPANCY_FEE_PERCENTAGE: Decimal = Field(default=Decimal("5"), ge=0, le=100)


class Settings(BaseSettings):
    """Main application settings"""

    model_config = _ENV_CONFIG

    APP_NAME: str = Field(default="Dockit Licensing Core")
    APP_VERSION: str = Field(default="0.1.0")
    ENVIRONMENT: Environment = Field(default=Environment.DEVELOPMENT)
    DEBUG: bool = Field(default=False)
    API_V1_PREFIX: str = Field(default="/api/v1")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    licensing: LicensingSettings = Field(default_factory=LicensingSettings)
    settlement: SettlementSettings = Field(default_factory=SettlementSettings)
    refund: RefundSettings = Field(default_factory=RefundSettings)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
