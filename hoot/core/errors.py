"""Application-level exception types.

Route handlers and dependencies raise these; the global exception handlers
map each family to one HTTP status and a consistent JSON body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    field: str
    limit: int
    retry_after: int
    current_credits: int
    required_credits: int
    upstream_status: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
        headers: Optional response headers (e.g., Retry-After).
    """

    code: str
    message: str
    details: ErrorDetails | None = None
    headers: dict[str, str] | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input is malformed."""


class AuthenticationAppError(AppError):
    """Raised when no valid session is present."""


class AuthorizationAppError(AppError):
    """Raised when a valid session lacks the required privilege."""


class NotFoundAppError(AppError):
    """Raised when a referenced record does not exist."""


class ConflictAppError(AppError):
    """Raised when a create would duplicate an existing record."""


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget."""


class UpstreamAppError(AppError):
    """Raised when an external dependency fails."""


class DataStoreAppError(UpstreamAppError):
    """Raised when the hosted database/auth provider call fails."""


class PaymentAppError(UpstreamAppError):
    """Raised when the payment provider call fails."""


class BackendAppError(UpstreamAppError):
    """Raised when the job backend call fails."""
