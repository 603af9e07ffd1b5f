"""
Settings for Congregation Accounts

Every value comes from the environment or a local .env file, read with
pydantic-settings. Each group has its own prefix: FIRESTORE_ for storage,
REPORT_ for the monthly PDF, and no prefix for application-wide options.

DESIGN DECISION: Storage settings are optional at startup.
Without them the app runs on in-memory storage, so a misconfigured
FIRESTORE_ group is reported by validate_all_settings() instead of
stopping the app.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirestoreSettings(BaseSettings):
    """Google Cloud Firestore storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    project_id: str = Field(
        ...,
        description="Google Cloud project that hosts the Firestore database"
    )
    notes_collection: str = Field(
        default="notes",
        description="Collection holding free-form notes"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Only warns when the key file is missing."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Service account key not found at {v}. "
                "Firestore calls will fail until it is in place."
            )
        return v


class ReportSettings(BaseSettings):
    """Monthly report configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    strategy: str = Field(
        default="styled",
        pattern="^(styled|template)$",
        description="Which renderer produces the monthly report"
    )
    congregation_name: Optional[str] = Field(
        default=None,
        max_length=120,
        description="Organization name printed on reports"
    )
    template_location: str = Field(
        default="templates/monthly-report-template.pdf",
        description="Path or http(s) URL of the fillable report template"
    )
    # Core PDF fonts are latin-1 only, so the peso sign cannot be drawn
    currency_symbol: str = Field(
        default="PHP ",
        max_length=8,
        description="Currency prefix used inside PDF reports"
    )


class AppSettings(BaseSettings):
    """Application-wide options with no prefix."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Display
    currency_symbol: str = Field(
        default="₱",
        max_length=8,
        description="Currency symbol shown on screen"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many transactions the dashboard lists"
    )


class Settings(BaseSettings):
    """Entry point to every settings group."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Each group is read when first asked for, so one bad group does not block the others

    @property
    def firestore(self) -> FirestoreSettings:
        return FirestoreSettings()

    @property
    def report(self) -> ReportSettings:
        return ReportSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Shared Settings instance. Tests call get_settings.cache_clear() after changing the environment."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try to load every settings group.

    Returns:
        {group: loaded_ok}, plus "{group}_error" with the message for each
        group that failed
    """
    results = {}

    settings = get_settings()

    for name in ("firestore", "report", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
