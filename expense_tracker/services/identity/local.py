"""
In-process session provider.

Holds the signed-in user in memory and notifies subscribers on change.
Used by tests and by embedding applications that authenticate users
themselves and only need to tell the core who is signed in.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from expense_tracker.services.identity.interface import (
    IdentityError,
    IdentityProviderInterface,
    SessionCallback,
    Unsubscribe,
)


class AuthUser(BaseModel):
    """The signed-in user as the identity provider reports it."""
    model_config = ConfigDict(str_strip_whitespace=True)

    uid: str = Field(..., min_length=1)
    email: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def greeting_name(self) -> str:
        return self.display_name or self.email or self.uid


class LocalSessionProvider(IdentityProviderInterface):
    """Identity provider backed by a single in-memory session."""

    def __init__(self, user: Optional[AuthUser] = None):
        self._user = user
        self._subscribers: list[SessionCallback] = []

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._user

    def get_current_user_id(self) -> Optional[str]:
        return self._user.uid if self._user else None

    def subscribe_to_session_changes(self, callback: SessionCallback) -> Unsubscribe:
        self._subscribers.append(callback)
        # Subscribers learn the current state immediately
        callback(self.get_current_user_id())

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def sign_in(self, user: AuthUser) -> None:
        if self._user is not None and self._user.uid != user.uid:
            raise IdentityError("Another user is already signed in")
        self._user = user
        self._notify()

    def sign_out(self) -> None:
        self._user = None
        self._notify()

    def _notify(self) -> None:
        user_id = self.get_current_user_id()
        for callback in list(self._subscribers):
            callback(user_id)
