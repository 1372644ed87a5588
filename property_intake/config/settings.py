"""
Configuration Management for Property Intake

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Wizard wording, display conventions and the REST backend location are
all visible in one place and validated at startup.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WizardSettings(BaseSettings):
    """Conversation wording and display conventions."""

    model_config = SettingsConfigDict(
        env_prefix="WIZARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    intro_message: str = Field(
        default=(
            "Bonjour! Je vais te poser quelques questions pour créer la fiche. "
            "Réponds « passer » pour laisser un champ facultatif vide."
        ),
        description="First assistant message of every conversation"
    )
    skip_acknowledgement: str = Field(
        default="D'accord, on laisse ce champ vide pour l'instant.",
        description="Note appended when an optional field is skipped"
    )
    empty_answer_placeholder: str = Field(
        default="[réponse vide]",
        description="Shown in the transcript for blank answers"
    )
    missing_value_placeholder: str = Field(
        default="—",
        description="Shown in the summary for absent values"
    )
    currency_symbol: str = Field(
        default="$",
        min_length=1,
        description="Currency symbol printed after amounts"
    )
    skip_command: str = Field(
        default="passer",
        min_length=1,
        description="Phrase submitted by the dedicated skip button"
    )
    extra_skip_phrases: str = Field(
        default="",
        description="Comma-separated phrases added to the built-in skip list"
    )

    @field_validator('skip_command')
    @classmethod
    def normalize_skip_command(cls, v: str) -> str:
        """Skip command is matched case-insensitively."""
        return v.strip().lower()

    @property
    def extra_skip_phrases_list(self) -> list[str]:
        """Get extra skip phrases as a list."""
        return [
            phrase.strip().lower()
            for phrase in self.extra_skip_phrases.split(",")
            if phrase.strip()
        ]


class ApiSettings(BaseSettings):
    """Property management REST backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PROPERTY_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: Optional[str] = Field(
        default=None,
        description="Backend root, e.g. https://backend.example.com/api"
    )
    token: Optional[str] = Field(
        default=None,
        description="Bearer token sent with every request"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None

    @property
    def is_configured(self) -> bool:
        return self.base_url is not None


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
        description="Minimum level for operational logs"
    )


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def wizard(self) -> WizardSettings:
        return WizardSettings()

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus {setting_name_error: message}
    for the ones that failed. Useful for startup checks.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    for name in ("wizard", "api", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
