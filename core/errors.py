"""
Shared error types for the gateway.

The upstream request routine is the only place that raises the classified
HTTP errors below. Messages are safe to show to end users: they never contain
an API key or a tenant base URL.
"""

from __future__ import annotations

from typing import Optional, Sequence


class ValidationIssue(ValueError):
    def __init__(
        self,
        message: str,
        field: str = "unknown",
        error_type: str = "invalid",
        error_code: str | None = None,
        data: dict | None = None,
    ):
        super().__init__(message)
        self.field = field
        self.error_type = error_type
        self.error_code = error_code
        self.data = data

    def to_dict(self) -> dict:
        return {
            "type": "ValidationIssue",
            "message": str(self),
            "field": self.field,
            "error_type": self.error_type,
        }


class GatewayError(Exception):
    """Base class for classified gateway failures."""

    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "type": type(self).__name__,
            "message": self.message,
            "retryable": self.retryable,
        }


class ConfigurationError(GatewayError):
    """Per-tenant configuration is missing; raised before any network I/O."""

    def __init__(self, message: str, missing_headers: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.missing_headers = tuple(missing_headers or ())

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.missing_headers:
            data["missing_headers"] = list(self.missing_headers)
        return data


class AuthenticationError(GatewayError):
    """Upstream rejected the tenant credentials (HTTP 401/403)."""


class RateLimitError(GatewayError):
    """Upstream throttled the request (HTTP 429)."""

    retryable = True

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data


class ApiError(GatewayError):
    """Any other non-2xx upstream response."""

    def __init__(self, message: str, status_code: int, retryable: Optional[bool] = None):
        super().__init__(message)
        self.status_code = status_code
        if retryable is None:
            retryable = status_code == 408 or status_code >= 500
        self.retryable = retryable

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


def describe_error(error: BaseException) -> dict:
    """Structured, credential-free description of any error for logs and tool output."""
    if isinstance(error, (GatewayError, ValidationIssue)):
        return error.to_dict()
    return {"type": type(error).__name__, "message": str(error) or type(error).__name__}
