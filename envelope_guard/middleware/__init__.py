"""Middleware package: error hierarchy, request ID and envelope linting."""

from envelope_guard.middleware.envelope_lint import EnvelopeLintMiddleware
from envelope_guard.middleware.error_handler import (
    ApiError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitExceededError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnprocessableEntityError,
    error_response,
    register_error_handlers,
)
from envelope_guard.middleware.request_id import RequestIdMiddleware

__all__ = [
    "ApiError",
    "BadRequestError",
    "ConflictError",
    "EnvelopeLintMiddleware",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitExceededError",
    "RequestIdMiddleware",
    "ServiceUnavailableError",
    "UnauthorizedError",
    "UnprocessableEntityError",
    "error_response",
    "register_error_handlers",
]
