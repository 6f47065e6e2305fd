"""
Error taxonomy for catalog requests.

Every failure that crosses the HttpClient boundary is one of the ErrorKind
values below. Configuration problems are a separate exception type: they
happen once at startup and stop the gateway from being built at all.
"""
from __future__ import annotations
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"
    CANCELLED = "cancelled"


ERROR_MESSAGES = {
    ErrorKind.TIMEOUT: "Request timeout. Please try again.",
    ErrorKind.NETWORK_UNREACHABLE: "Network error. Please check your connection.",
    ErrorKind.UNAUTHORIZED: "Invalid API key.",
    ErrorKind.NOT_FOUND: "Resource not found.",
    ErrorKind.RATE_LIMITED: "Too many requests. Please try again later.",
    ErrorKind.SERVER_ERROR: "Server error. Please try again later.",
    ErrorKind.UNKNOWN: "An unknown error occurred.",
    ErrorKind.CANCELLED: "Request cancelled.",
}


class ConfigurationError(Exception):
    """Missing or malformed startup configuration."""


class CatalogError(Exception):
    """A failed catalog request, normalized to one ErrorKind."""

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.kind = kind
        self.message = message or ERROR_MESSAGES[kind]
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def cancelled(self) -> bool:
        return self.kind is ErrorKind.CANCELLED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status_code={self.status_code!r})"


class RequestCancelled(CatalogError):
    """The caller gave up on the request. Never shown to the user."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(ErrorKind.CANCELLED, message)
