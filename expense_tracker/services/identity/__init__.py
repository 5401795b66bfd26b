"""Identity services package."""

from expense_tracker.services.identity.interface import (
    IdentityError,
    IdentityProviderInterface,
    SessionCallback,
    Unsubscribe,
)
from expense_tracker.services.identity.local import AuthUser, LocalSessionProvider

__all__ = [
    "AuthUser",
    "IdentityError",
    "IdentityProviderInterface",
    "LocalSessionProvider",
    "SessionCallback",
    "Unsubscribe",
]
