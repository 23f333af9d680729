"""
Error response models for standardized API error handling.

Every non-validation error leaves the API as ``{"detail", "error_code"}``;
FastAPI's own 422 body is kept for schema violations.
"""

from typing import Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Generic error response model for API errors.

    Used for invalid input, missing sessions, store failures and
    authentication failures.
    """
    detail: str = Field(
        ...,
        description="Human-readable error message"
    )
    error_code: Optional[str] = Field(
        default=None,
        description="Application-specific error code for programmatic handling"
    )
