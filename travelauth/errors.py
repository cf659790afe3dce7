from __future__ import annotations

from typing import Optional


class AuthClientError(Exception):
    """Base class for everything the auth API client raises."""


class AuthApiError(AuthClientError):
    """The backend answered with an error status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AuthTransportError(AuthClientError):
    """The request never got a response (connection, timeout, bad config)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class AuthResponseError(AuthClientError):
    """A successful response whose body did not have the expected shape."""


class NotAuthenticatedError(Exception):
    """The operation needs stored tokens and there are none."""
