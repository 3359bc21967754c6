from __future__ import annotations

from typing import Any


class FinboardError(Exception):
    """Base class for every error raised by finboard."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class NoTimeSeriesFound(FinboardError):
    """Response looks like a time series but carries no dated records."""


class ConnectionFailed(FinboardError):
    """The endpoint could not be queried or answered with an error."""


class HttpError(ConnectionFailed):
    def __init__(self, status_code: int, url: str | None = None):
        super().__init__(f"HTTP error! status: {status_code}", {"status_code": status_code, "url": url})
        self.status_code = status_code


class ProviderError(ConnectionFailed):
    """The body was parsed but the provider reported a problem."""

    retryable = False


class RateLimitError(ProviderError):
    retryable = True

    def __init__(self, message: str = "API call frequency limit reached. Please try again later.", **details: Any):
        super().__init__(message, details)


class ExtractionError(FinboardError):
    """Fetching data for a widget failed."""


class DashboardImportError(FinboardError):
    """Dashboard text could not be imported; nothing was applied."""
