"""Application-level exception types.

Services raise these instead of HTTP exceptions; the global handler in
``app.core.exception_handlers`` turns them into JSON error envelopes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    field: str
    remaining_attempts: int
    blocked: bool
    blocked_until: float
    retry_after: int
    business_id: str
    user_id: str
    module_id: str
    status_code: int
    max_mb: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for clients and logs.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input fails validation."""


class AuthenticationAppError(AppError):
    """Raised when the caller is not authenticated."""

    status_code = 401


class AuthorizationAppError(AppError):
    """Raised when the caller lacks the required role."""

    status_code = 403


class NotFoundAppError(AppError):
    """Raised when a business, user, module or record does not exist."""

    status_code = 404


class RateLimitAppError(AppError):
    """Raised when a client is throttled."""

    status_code = 429


class BackendAppError(AppError):
    """Raised when the hosted database/auth backend fails."""

    status_code = 500


class StorageAppError(AppError):
    """Raised when object storage is misconfigured or a storage call fails."""

    status_code = 500
