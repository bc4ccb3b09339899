"""Local session manager.

Stores the signed-in identity in a JSON file together with the time of
the last activity. A session that has been idle for longer than the
configured timeout is treated as signed out.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from src.auth.models import AuthEvent, Identity

logger = logging.getLogger(__name__)

# Users are warned this many minutes before an idle session expires
WARNING_WINDOW_MINUTES = 5

AuthCallback = Callable[[AuthEvent, Identity | None], None]


class NotAuthenticatedError(Exception):
    """Raised when an operation requires a signed-in user."""


class Subscription:
    """Handle returned by ``on_auth_state_change``."""

    def __init__(self, manager: SessionManager, callback: AuthCallback) -> None:
        self._manager = manager
        self.callback = callback

    def unsubscribe(self) -> None:
        """Stop receiving auth-state changes."""
        self._manager._unsubscribe(self)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    """Sign-in state backed by a JSON session file."""

    def __init__(
        self,
        path: str | Path,
        timeout_minutes: int = 30,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the session manager.

        Args:
            path: Session file location.
            timeout_minutes: Idle time after which the session expires.
            clock: Source of the current time (UTC).
        """
        if timeout_minutes <= 0:
            raise ValueError("timeout_minutes must be > 0")
        self.path = Path(path)
        self.timeout = timedelta(minutes=timeout_minutes)
        self._clock = clock
        self._subscriptions: list[Subscription] = []

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        """Register a callback for sign-in and sign-out events."""
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _notify(self, event: AuthEvent, identity: Identity | None) -> None:
        for subscription in list(self._subscriptions):
            subscription.callback(event, identity)

    def _read(self) -> dict | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return None
        if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
            return None
        return data

    def _write(self, identity: Identity, last_active: datetime) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "user": identity.to_dict(),
            "last_active_at": last_active.isoformat(),
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def _last_active(self, data: dict) -> datetime | None:
        raw = data.get("last_active_at")
        if not isinstance(raw, str):
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    def get_user(self) -> Identity | None:
        """Return the signed-in identity, or None.

        An expired session is signed out as a side effect.
        """
        data = self._read()
        if data is None:
            return None

        user = data["user"]
        if not isinstance(user.get("id"), str) or not isinstance(
            user.get("email"), str
        ):
            return None

        last_active = self._last_active(data)
        if last_active is None or self._clock() - last_active >= self.timeout:
            logger.info("Session for %s expired after inactivity", user["email"])
            self.sign_out()
            return None

        return Identity(id=user["id"], email=user["email"])

    def require_user(self) -> Identity:
        """Return the signed-in identity or raise NotAuthenticatedError."""
        identity = self.get_user()
        if identity is None:
            raise NotAuthenticatedError("Not signed in")
        return identity

    def sign_in(self, email: str) -> Identity:
        """Sign in with an email address and start a fresh session."""
        identity = Identity.for_email(email)
        self._write(identity, self._clock())
        logger.info("Signed in as %s", identity.email)
        self._notify(AuthEvent.SIGNED_IN, identity)
        return identity

    def sign_out(self) -> None:
        """End the session (no-op if nobody is signed in)."""
        existed = self.path.exists()
        self.path.unlink(missing_ok=True)
        if existed:
            logger.info("Signed out")
            self._notify(AuthEvent.SIGNED_OUT, None)

    def touch(self) -> None:
        """Record activity, pushing back the inactivity expiry."""
        identity = self.get_user()
        if identity is not None:
            self._write(identity, self._clock())

    def minutes_remaining(self) -> float | None:
        """Minutes until the idle session expires, or None when signed out."""
        data = self._read()
        if data is None:
            return None
        last_active = self._last_active(data)
        if last_active is None:
            return None
        remaining = self.timeout - (self._clock() - last_active)
        return max(remaining.total_seconds() / 60, 0.0)

    def expiring_soon(self) -> bool:
        """True when the session will expire within the warning window."""
        remaining = self.minutes_remaining()
        return remaining is not None and remaining <= WARNING_WINDOW_MINUTES
