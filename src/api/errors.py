# error types raised by the api layer and the client-side form checks
from typing import Optional


class DashboardError(Exception):
    """Base class for everything the console reports back to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkError(DashboardError):
    """
    No response was received (connection refused, timeout, DNS...).
    The user may simply retry.
    """


class AuthExpired(DashboardError):
    """
    The backend answered 401. The stored token is already gone by the time
    this is raised.
    """

    DEFAULT_MESSAGE = "Admin authentication failed. Please log in again."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)


class ApiError(DashboardError):
    """Any other non-2xx answer. The message is shown verbatim."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseShapeError(ApiError):
    """2xx answer whose body does not look like the record we asked for."""


class ValidationError(DashboardError):
    """Raised before any request is sent."""
