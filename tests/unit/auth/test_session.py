"""Tests for the local session manager."""

import json
from datetime import UTC, datetime, timedelta

import pytest


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self):
        self.now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(tmp_path, clock):
    from src.auth.session import SessionManager

    return SessionManager(tmp_path / "session.json", timeout_minutes=30, clock=clock)


class TestIdentity:
    """Test identity derivation."""

    def test_same_email_same_id(self):
        from src.auth.models import Identity

        assert Identity.for_email("Alex@Example.com ").id == Identity.for_email(
            "alex@example.com"
        ).id

    def test_different_emails_differ(self):
        from src.auth.models import Identity

        assert Identity.for_email("a@x.com").id != Identity.for_email("b@x.com").id

    @pytest.mark.parametrize("email", ["", "   ", "not-an-email"])
    def test_invalid_email_raises(self, email):
        from src.auth.models import Identity

        with pytest.raises(ValueError):
            Identity.for_email(email)


class TestSignInOut:
    """Test signing in and out."""

    def test_signed_out_by_default(self, session):
        assert session.get_user() is None
        assert session.minutes_remaining() is None

    def test_sign_in_persists_identity(self, session, tmp_path):
        identity = session.sign_in("alex@example.com")

        assert session.get_user() == identity
        data = json.loads((tmp_path / "session.json").read_text(encoding="utf-8"))
        assert data["user"] == {"id": identity.id, "email": "alex@example.com"}

    def test_sign_out_clears_session(self, session):
        session.sign_in("alex@example.com")

        session.sign_out()

        assert session.get_user() is None
        assert not session.path.exists()

    def test_require_user(self, session):
        from src.auth.session import NotAuthenticatedError

        with pytest.raises(NotAuthenticatedError):
            session.require_user()

        identity = session.sign_in("alex@example.com")
        assert session.require_user() == identity

    def test_corrupt_session_file_is_signed_out(self, session):
        session.path.write_text("garbage", encoding="utf-8")

        assert session.get_user() is None


class TestSubscriptions:
    """Auth-state change notifications."""

    def test_callbacks_receive_events(self, session):
        from src.auth.models import AuthEvent

        events = []
        session.on_auth_state_change(lambda event, ident: events.append((event, ident)))

        identity = session.sign_in("alex@example.com")
        session.sign_out()

        assert events == [(AuthEvent.SIGNED_IN, identity), (AuthEvent.SIGNED_OUT, None)]

    def test_sign_out_when_signed_out_does_not_notify(self, session):
        events = []
        session.on_auth_state_change(lambda event, ident: events.append(event))

        session.sign_out()

        assert events == []

    def test_unsubscribe_stops_notifications(self, session):
        events = []
        subscription = session.on_auth_state_change(
            lambda event, ident: events.append(event)
        )
        subscription.unsubscribe()

        session.sign_in("alex@example.com")

        assert events == []


class TestInactivityTimeout:
    """Idle sessions expire."""

    def test_session_valid_before_timeout(self, session, clock):
        session.sign_in("alex@example.com")
        clock.advance(29)

        assert session.get_user() is not None

    def test_session_expires_after_timeout(self, session, clock):
        from src.auth.models import AuthEvent

        events = []
        session.on_auth_state_change(lambda event, ident: events.append(event))
        session.sign_in("alex@example.com")
        clock.advance(30)

        assert session.get_user() is None
        assert events == [AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT]
        assert not session.path.exists()

    def test_touch_extends_session(self, session, clock):
        session.sign_in("alex@example.com")
        clock.advance(20)
        session.touch()
        clock.advance(20)

        assert session.get_user() is not None
        assert session.minutes_remaining() == pytest.approx(10)

    def test_expiring_soon(self, session, clock):
        session.sign_in("alex@example.com")
        assert not session.expiring_soon()

        clock.advance(26)

        assert session.expiring_soon()

    def test_timeout_must_be_positive(self, tmp_path):
        from src.auth.session import SessionManager

        with pytest.raises(ValueError):
            SessionManager(tmp_path / "session.json", timeout_minutes=0)
