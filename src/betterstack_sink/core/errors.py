"""
Error types raised by the Better Stack sink.

Configuration problems are fatal and raised synchronously. Delivery problems
are recoverable and subject to the sink's suppression policy. Environment
problems (an unusable storage directory) are downgraded by the sink and never escape.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    DELIVERY = "delivery"
    ENVIRONMENT = "environment"


def create_error_context(**fields: Any) -> dict[str, Any]:
    """Build an error context dict, dropping unset fields."""
    return {key: value for key, value in fields.items() if value is not None}


class BetterStackSinkError(Exception):
    """Base class for all sink errors."""

    category: ErrorCategory = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = create_error_context(**context)


class ConfigurationError(BetterStackSinkError):
    """Missing or invalid sink configuration."""

    category = ErrorCategory.CONFIGURATION


class DeliveryError(BetterStackSinkError):
    """The ingestion endpoint answered with a non-success status."""

    category = ErrorCategory.DELIVERY

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, endpoint=endpoint, body=body)
        self.status_code = status_code


class UnsupportedEnvironmentError(BetterStackSinkError):
    """No persistent key-value storage is available for durable mode."""

    category = ErrorCategory.ENVIRONMENT


__all__ = [
    "BetterStackSinkError",
    "ConfigurationError",
    "DeliveryError",
    "ErrorCategory",
    "UnsupportedEnvironmentError",
    "create_error_context",
]
