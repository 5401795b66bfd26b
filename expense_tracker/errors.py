"""
Error Taxonomy

Every failure the core can report falls into one of four kinds:

- ValidationError: bad user input, recoverable (re-prompt)
- NotAuthenticated: no session, caller must send the user to sign-in
- NotAuthorized: session present but does not own the target record
- CollaboratorError: the document store or identity provider failed

DESIGN DECISION: Stores surface collaborator failures unchanged.
Nothing here retries or suppresses errors.
"""

from typing import Optional


class ExpenseTrackerError(Exception):
    """Base exception for the expense tracker core."""
    pass


class ValidationError(ExpenseTrackerError):
    """User-entered data failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class NotAuthenticated(ExpenseTrackerError):
    """No user is signed in."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class NotAuthorized(ExpenseTrackerError):
    """The signed-in user does not own the record."""

    def __init__(self, message: str = "Not authorized to modify this record"):
        super().__init__(message)


class CollaboratorError(ExpenseTrackerError):
    """An external collaborator call failed."""
    pass
