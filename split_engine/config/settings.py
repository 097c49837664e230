"""
Configuration Management for Split Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Only tunables live here. Fixed design constants (like the low-confidence
threshold of the extraction workflow) stay next to the code that uses them.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AllocationSettings(BaseSettings):
    """Allocation strategy configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ALLOCATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency used for new splits"
    )
    percentage_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        le=1,
        description="Allowed deviation of the percentage sum from 100 (percentage points)"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.strip().upper()


class ReconciliationSettings(BaseSettings):
    """Reconciliation evaluator configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECONCILIATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Default tolerance in currency units for total reconciliation"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def upper_log_level(cls, v):
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def allocation(self) -> AllocationSettings:
        return AllocationSettings()

    @property
    def reconciliation(self) -> ReconciliationSettings:
        return ReconciliationSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("app", "allocation", "reconciliation"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
