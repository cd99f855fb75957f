"""Custom exceptions for the downstream client."""

from __future__ import annotations


class ClientError(Exception):
    """Base error for downstream HTTP failures.

    Attributes:
        status_code: The HTTP status code returned by the next hop.
        message: A human-readable error description.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class ServerError(ClientError):
    """Raised when the next hop returns a 5xx response."""

    def __init__(self, status_code: int = 500, message: str = "Server error") -> None:
        super().__init__(status_code=status_code, message=message)
