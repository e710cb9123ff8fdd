from typing import Optional


class ApiError(Exception):
    """
    A request to the commerce API failed.

    status is the HTTP status code, or None when the request never got a
    response (connection refused, timeout, ...). message is the text the
    server put in its error envelope, if any.
    """

    def __init__(self, status: Optional[int], message: Optional[str] = None):
        super().__init__(message or f"Request failed with status {status}")
        self.status = status
        self.message = message

    def describe(self, fallback: str) -> str:
        """Server message verbatim when present, otherwise the fallback."""
        return self.message or fallback


class AuthenticationError(ApiError):
    """401, the credential was missing, expired or rejected."""


class AuthorizationError(ApiError):
    """403, authenticated but not allowed."""
