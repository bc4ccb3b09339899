"""Tests for Settings configuration class."""

from pathlib import Path

import pytest
from pydantic import ValidationError

ENV_VARS = [
    "TRACKER_DB_PATH",
    "FAVORITES_PATH",
    "SESSION_PATH",
    "SESSION_TIMEOUT_MINUTES",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SORT_KEY",
    "DEFAULT_SORT_DIRECTION",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove settings-related environment variables."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestSettingsDefaults:
    """Test that Settings loads sensible defaults."""

    def test_settings_loads_with_defaults(self):
        from src.config.settings import Settings
        from src.tracker.pipeline import SortDirection, SortKey

        settings = Settings(_env_file=None)

        assert settings.tracker_db_path == Path("./data/tracker.db")
        assert settings.favorites_path == Path("./data/favorites.json")
        assert settings.session_path == Path("./data/session.json")
        assert settings.session_timeout_minutes == 30
        assert settings.default_page_size == 12
        assert settings.default_sort_key == SortKey.DATE
        assert settings.default_sort_direction == SortDirection.DESC
        assert settings.log_level == "INFO"


class TestSettingsFromEnv:
    """Test overriding settings from the environment."""

    def test_env_overrides(self, monkeypatch):
        from src.config.settings import Settings
        from src.tracker.pipeline import SortDirection, SortKey

        monkeypatch.setenv("TRACKER_DB_PATH", "/tmp/custom.db")
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "24")
        monkeypatch.setenv("DEFAULT_SORT_KEY", "COMPANY")
        monkeypatch.setenv("DEFAULT_SORT_DIRECTION", "Asc")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.tracker_db_path == Path("/tmp/custom.db")
        assert settings.default_page_size == 24
        assert settings.default_sort_key == SortKey.COMPANY
        assert settings.default_sort_direction == SortDirection.ASC
        assert settings.log_level == "DEBUG"

    def test_reads_env_file(self, tmp_path):
        from src.config.settings import Settings

        env_file = tmp_path / ".env"
        env_file.write_text("SESSION_TIMEOUT_MINUTES=45\n", encoding="utf-8")

        settings = Settings(_env_file=env_file)

        assert settings.session_timeout_minutes == 45


class TestSettingsValidation:
    """Invalid values are rejected."""

    @pytest.mark.parametrize("size", [0, 10, 100])
    def test_page_size_must_be_an_option(self, size):
        from src.config.settings import Settings

        with pytest.raises(ValidationError, match="Invalid page size"):
            Settings(_env_file=None, default_page_size=size)

    def test_timeout_must_be_positive(self):
        from src.config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(_env_file=None, session_timeout_minutes=0)

    def test_invalid_log_level(self):
        from src.config.settings import Settings

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None, log_level="LOUD")

    def test_invalid_sort_key(self):
        from src.config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(_env_file=None, default_sort_key="salary")


class TestSettingsSingleton:
    """get_settings caches until reset."""

    def test_get_settings_returns_same_instance(self):
        from src.config.settings import get_settings, reset_settings

        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first
