"""
Abstract Identity Provider Interface

The core consumes exactly two things from the identity provider:
a point-in-time read of the signed-in user id, and a subscription to
session changes. Sign-in flows, password handling and profiles belong
to the provider SDK and stay outside this package.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from expense_tracker.errors import CollaboratorError


SessionCallback = Callable[[Optional[str]], None]
Unsubscribe = Callable[[], None]


class IdentityProviderInterface(ABC):
    """Abstract interface for the identity collaborator."""

    @abstractmethod
    def get_current_user_id(self) -> Optional[str]:
        """
        Get the signed-in user's id.

        Returns:
            The user id, or None when nobody is signed in
        """
        pass

    @abstractmethod
    def subscribe_to_session_changes(self, callback: SessionCallback) -> Unsubscribe:
        """
        Register a callback invoked with the new user id (or None)
        whenever the session changes.

        Returns:
            A callable that removes the subscription
        """
        pass


class IdentityError(CollaboratorError):
    """The identity provider failed."""
    pass
