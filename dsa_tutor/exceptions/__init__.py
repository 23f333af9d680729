"""
Exception handling package for the DSA tutor chat API.
"""

from .base_exceptions import (
    TutorException,
    ValidationError,
    NotFoundError,
    DatabaseError,
    ProviderError,
    ProviderUnavailableError,
    AuthenticationError,
    ConfigurationError
)

__all__ = [
    "TutorException",
    "ValidationError",
    "NotFoundError",
    "DatabaseError",
    "ProviderError",
    "ProviderUnavailableError",
    "AuthenticationError",
    "ConfigurationError"
]
