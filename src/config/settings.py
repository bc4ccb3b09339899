"""Configuration settings for App-Tracker."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.tracker.pipeline import (
    DEFAULT_PAGE_SIZE,
    PAGE_SIZE_OPTIONS,
    SortDirection,
    SortKey,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Paths
    tracker_db_path: Path = Field(
        default=Path("./data/tracker.db"),
        description="Path to the SQLite database holding applications and groceries",
    )
    favorites_path: Path = Field(
        default=Path("./data/favorites.json"),
        description="Device-local file holding favorited application ids",
    )
    session_path: Path = Field(
        default=Path("./data/session.json"),
        description="File holding the signed-in session",
    )

    # Session
    session_timeout_minutes: Annotated[int, Field(gt=0)] = Field(
        default=30,
        description="Idle minutes before the session signs out",
    )

    # Dashboard defaults
    default_page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        description=f"Applications per page, one of {PAGE_SIZE_OPTIONS}",
    )
    default_sort_key: SortKey = Field(
        default=SortKey.DATE,
        description="Default sort field: date_applied, company, position, status",
    )
    default_sort_direction: SortDirection = Field(
        default=SortDirection.DESC,
        description="Default sort direction: asc or desc",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("default_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Page size must be one of the offered options."""
        if v not in PAGE_SIZE_OPTIONS:
            raise ValueError(
                f"Invalid page size: {v}. Must be one of {PAGE_SIZE_OPTIONS}"
            )
        return v

    @field_validator("default_sort_key", "default_sort_direction", mode="before")
    @classmethod
    def normalize_enum_text(cls, v: object) -> object:
        """Accept enum values in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
