"""Data models for session handling."""

import uuid
from dataclasses import dataclass
from enum import Enum

# Namespace for deriving stable user ids from email addresses
IDENTITY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "app-tracker:identity")


class AuthEvent(str, Enum):
    """Auth-state change delivered to subscribers."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class Identity:
    """The authenticated user.

    Attributes:
        id: Stable owner identifier used to scope stored rows.
        email: Email address the user signed in with.
    """

    id: str
    email: str

    @classmethod
    def for_email(cls, email: str) -> "Identity":
        """Build the identity for an email address (same email, same id)."""
        normalized = email.strip().lower()
        if not normalized or "@" not in normalized:
            raise ValueError(f"Invalid email address: {email!r}")
        return cls(id=str(uuid.uuid5(IDENTITY_NAMESPACE, normalized)), email=normalized)

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email}
