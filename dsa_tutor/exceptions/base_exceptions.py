"""
Custom exception hierarchy for the DSA tutor chat API.

Routers translate these into HTTP status codes; services raise them so that
callers can tell caller-fixable input problems apart from provider and
store failures.
"""

from typing import Optional


class TutorException(Exception):
    """Base exception for the DSA tutor application."""

    def __init__(self, message: str, error_code: str = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)


class ValidationError(TutorException):
    """Raised when request content is missing or empty."""
    pass


class NotFoundError(TutorException):
    """
    Raised when a session does not exist or is owned by another user.

    Both cases share this one error so that callers cannot probe for other
    users' sessions.
    """
    pass


class DatabaseError(TutorException):
    """Raised when the conversation store cannot be read or written."""
    pass


class ProviderError(TutorException):
    """Raised when the generation provider call fails (quota, network, auth, timeout)."""

    def __init__(
        self,
        message: str,
        original_error: Exception = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.original_error = original_error
        self.status_code = status_code


class ProviderUnavailableError(ProviderError):
    """Raised when no generation provider credential is configured."""
    pass


class AuthenticationError(TutorException):
    """Raised when the caller's access token is missing, invalid or expired."""
    pass


class ConfigurationError(TutorException):
    """Raised when configuration is invalid or missing."""
    pass
