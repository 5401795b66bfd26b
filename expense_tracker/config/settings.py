"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORY_NAMES = (
    "Food",
    "Transportation",
    "Entertainment",
    "Shopping",
    "Utilities",
    "Health",
    "Other",
)


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets document store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Worksheet names, one per collection
    expenses_sheet_name: str = Field(
        default="expenses",
        description="Worksheet holding expense records"
    )
    categories_sheet_name: str = Field(
        default="categories",
        description="Worksheet holding category and marker records"
    )
    audit_sheet_name: str = Field(
        default="audit_log",
        description="Worksheet holding audit events"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v

    def worksheet_for(self, collection: str) -> str:
        """Map a logical collection name to its worksheet title."""
        mapping = {
            "expenses": self.expenses_sheet_name,
            "categories": self.categories_sheet_name,
            "audit_log": self.audit_sheet_name,
        }
        return mapping.get(collection, collection)


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

    # Display
    currency_symbol: str = Field(
        default="₹",
        max_length=3,
        description="Symbol used when formatting amounts"
    )

    # Seeded once per user on first category listing
    default_categories: str = Field(
        default=",".join(DEFAULT_CATEGORY_NAMES),
        description="Comma-separated list of default category names"
    )

    @property
    def default_categories_list(self) -> list[str]:
        """Get default categories as a list."""
        return [
            name.strip()
            for name in self.default_categories.split(",")
            if name.strip()
        ]


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
