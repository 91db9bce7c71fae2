"""
Error Taxonomy
==============

Every failure the pipeline reports to a caller is one of these.
The web layer converts them to a JSON body:

    {"message": "<human readable>", "error": "<underlying error text>"}

with the HTTP status code carried by the exception class.
"""

from typing import Optional


class ReviewRelayError(Exception):
    """Base exception for all Review Relay errors."""

    status_code: int = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(ReviewRelayError):
    """Missing or malformed request data."""
    status_code = 400


class UnauthorizedError(ReviewRelayError):
    """Missing or invalid API key."""
    status_code = 401


class NotFoundError(ReviewRelayError):
    """Unknown id, or nothing matched a selection."""
    status_code = 404


class UpstreamError(ReviewRelayError):
    """External API failure or absent credentials."""
    status_code = 500
