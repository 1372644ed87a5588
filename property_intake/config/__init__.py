"""Configuration package."""

from property_intake.config.settings import (
    ApiSettings,
    AppSettings,
    Settings,
    WizardSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "Settings",
    "WizardSettings",
    "get_settings",
    "validate_all_settings",
]
