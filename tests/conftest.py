"""Pytest configuration and shared fixtures."""

from datetime import UTC, date, datetime

import pytest

from src.auth.models import Identity
from src.tracker.models import ApplicationStatus, JobApplication


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset logging and settings singletons between tests."""
    from src.config.settings import reset_settings
    from src.utils.logging import reset_logging

    reset_logging()
    reset_settings()
    yield
    reset_logging()
    reset_settings()


@pytest.fixture
def identity() -> Identity:
    """A signed-in user."""
    return Identity.for_email("alex@example.com")


@pytest.fixture
def other_identity() -> Identity:
    """A second user whose rows must stay invisible."""
    return Identity.for_email("sam@example.com")


@pytest.fixture
def make_application():
    """Factory for in-memory JobApplication records."""
    counter = {"n": 0}

    def _make(
        company: str = "Acme",
        position: str = "Engineer",
        location: str = "Remote",
        status: ApplicationStatus = ApplicationStatus.APPLIED,
        date_applied: date = date(2024, 1, 1),
        **kwargs,
    ) -> JobApplication:
        counter["n"] += 1
        now = datetime(2024, 1, 1, tzinfo=UTC)
        return JobApplication(
            id=kwargs.pop("id", f"app-{counter['n']}"),
            user_id=kwargs.pop("user_id", "owner-1"),
            company=company,
            position=position,
            location=location,
            date_applied=date_applied,
            status=status,
            created_at=now,
            updated_at=now,
            **kwargs,
        )

    return _make
