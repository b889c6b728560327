"""
Exceptions for the feedback portal.

Only ValidationError, AuthError and FeedbackNotFoundError ever reach a
caller. PersistenceReadError and SuggestionServiceError are raised
internally and recovered where they occur.
"""

from typing import Optional


class PortalError(Exception):
    """Base class for feedback portal errors."""
    pass


class ValidationError(PortalError):
    """Raised when citizen or admin input fails local validation."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Invalid input - {detail}")


class PersistenceReadError(PortalError):
    """Raised when the stored blob cannot be parsed into records."""
    pass


class SuggestionServiceError(PortalError):
    """Raised when the text-generation server cannot produce a reply."""
    pass


class AuthError(PortalError):
    """Raised on a credential mismatch or when an admin session is required."""

    DEFAULT_MESSAGE = "Tên đăng nhập hoặc mật khẩu không đúng"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.DEFAULT_MESSAGE)


class FeedbackNotFoundError(PortalError):
    """Raised when no record matches the requested id."""

    def __init__(self, feedback_id: str):
        self.feedback_id = feedback_id
        super().__init__(f"Feedback not found: {feedback_id}")


class DuplicateFeedbackError(PortalError):
    """Raised when appending a record whose id is already stored."""

    def __init__(self, feedback_id: str):
        self.feedback_id = feedback_id
        super().__init__(f"Feedback id already exists: {feedback_id}")
