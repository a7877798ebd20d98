"""Application-level exception types.

This module defines domain errors used across services, enabling consistent
error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    field: str
    slug: str
    http_status: int


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when client input fails validation or policy checks."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist or is not exposed."""


class UpstreamAppError(AppError):
    """Raised when a third-party service rejects or fails a call."""


class ConfigurationAppError(AppError):
    """Raised when a required integration is not configured."""
