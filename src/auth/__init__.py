"""Session handling.

Public API:
- SessionManager: Sign-in state, inactivity expiry and auth-state callbacks
- Identity: The signed-in user
- AuthEvent: Auth-state change events
- NotAuthenticatedError: Raised when an operation needs a signed-in user
"""

from src.auth.models import AuthEvent, Identity
from src.auth.session import NotAuthenticatedError, SessionManager, Subscription

__all__ = [
    "SessionManager",
    "Subscription",
    "Identity",
    "AuthEvent",
    "NotAuthenticatedError",
]
