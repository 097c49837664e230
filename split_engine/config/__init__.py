"""Configuration package."""

from split_engine.config.settings import (
    AllocationSettings,
    AppSettings,
    ReconciliationSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AllocationSettings",
    "AppSettings",
    "ReconciliationSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
