"""Exceptions raised by the Bot API client.

Exception Hierarchy:
    BotApiError (base)
    ├── BotTimeoutError - Request exceeded the configured timeout
    ├── BotNetworkError - Transport-level failure (DNS, connect, reset)
    ├── BotInvalidResponseError - Response body is not a usable JSON payload
    ├── BotHTTPError - Non-2xx response
    └── BotApplicationError - 2xx response carrying an error payload
"""

from typing import Any


class BotApiError(Exception):
    """Base exception for all Bot API failures.

    Attributes:
        code: Machine-readable error code (API-supplied where available).
        message: Human-readable error message.
        status_code: HTTP status code, or 0 when no response was received.
    """

    def __init__(self, code: str, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
        }


class BotTimeoutError(BotApiError):
    """Raised when the request is aborted by the client timeout."""

    def __init__(self, timeout: float) -> None:
        super().__init__("TIMEOUT", f"Request timed out after {timeout}s", 408)
        self.timeout = timeout


class BotNetworkError(BotApiError):
    """Raised when no HTTP response could be obtained."""

    def __init__(self, message: str) -> None:
        super().__init__("NETWORK_ERROR", message, 0)


class BotInvalidResponseError(BotApiError):
    """Raised when the response body is not valid JSON or not the expected shape."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__("INVALID_RESPONSE", message, status_code)


class BotHTTPError(BotApiError):
    """Raised for non-2xx responses."""

    pass


class BotApplicationError(BotApiError):
    """Raised when a successful HTTP response carries an error payload."""

    pass
