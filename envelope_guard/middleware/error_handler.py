"""API error hierarchy and FastAPI exception handlers.

All HTTP-facing errors extend ApiError. The handlers catch these (plus
FastAPI's RequestValidationError, Starlette's HTTPException and unhandled
exceptions) and render them through ``build`` so every failure leaves the
service as a canonical error envelope:
{ success: false, status, error: { code, message, ... }, meta? }.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from envelope_guard.builder import BuildKind, build_payload
from envelope_guard.catalog.status_catalog import DEFAULT_CATALOG, StatusCatalog
from envelope_guard.config.settings import EnvelopeGuardSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class ApiError(Exception):
    """Base error for all envelope-rendered API errors."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.meta = kwargs
        super().__init__(self.message)

    def error_fields(self) -> dict[str, Any]:
        """Fields for the ``error`` object beyond code and message."""
        return {}


class BadRequestError(ApiError):
    status_code = 400
    code = "BAD_REQUEST"
    message = "Malformed request"


class UnauthorizedError(ApiError):
    status_code = 401
    code = "UNAUTHORIZED"
    message = "Authentication required"


class ForbiddenError(ApiError):
    status_code = 403
    code = "FORBIDDEN"
    message = "You do not have permission to access this resource"


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class ConflictError(ApiError):
    status_code = 409
    code = "CONFLICT"
    message = "Request conflicts with the current state of the resource"


class UnprocessableEntityError(ApiError):
    """Payload validation failures, with field-level details."""

    status_code = 422
    code = "VALIDATION_ERROR"
    message = "Invalid input data"

    def __init__(
        self,
        message: str | None = None,
        details: list[dict[str, str]] | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__(message, **kwargs)
        self.details = list(details or [])

    def error_fields(self) -> dict[str, Any]:
        return {"details": self.details}


class RateLimitExceededError(ApiError):
    """Caller exceeded its rate limit; ``retry_after`` is in seconds."""

    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    message = "Too many requests. Please try again later."

    def __init__(
        self,
        message: str | None = None,
        retry_after: int | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

    def error_fields(self) -> dict[str, Any]:
        return {"retryAfter": self.retry_after} if self.retry_after is not None else {}


class ServiceUnavailableError(ApiError):
    status_code = 503
    code = "SERVICE_UNAVAILABLE"
    message = "Service temporarily unavailable"


# ---------------------------------------------------------------------------
# Envelope rendering
# ---------------------------------------------------------------------------


_KIND_BY_STATUS = {
    422: BuildKind.VALIDATION_ERROR,
    429: BuildKind.RATE_LIMITED,
    500: BuildKind.SERVER_ERROR,
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_response(
    status_code: int,
    fields: dict[str, Any] | None = None,
    *,
    request: Request | None = None,
    settings: EnvelopeGuardSettings | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render a canonical error envelope for ``status_code``.

    ``fields`` override the canonical defaults for the status (see
    ``envelope_guard.builder.build``). Rate-limit and server-error defaults
    come from ``settings``; codes for other statuses come from the catalog
    installed on the request's app, or the bundled one.
    """
    settings = settings or EnvelopeGuardSettings()
    kind = _KIND_BY_STATUS.get(status_code, BuildKind.GENERIC)
    payload: dict[str, Any] = {"status": status_code}

    if kind is BuildKind.RATE_LIMITED:
        payload["retryAfter"] = settings.default_retry_after_seconds
    if kind is BuildKind.SERVER_ERROR and request is not None and settings.expose_request_id:
        request_id = _request_id(request)
        if request_id:
            payload["requestId"] = request_id

    payload.update({key: value for key, value in (fields or {}).items() if value is not None})

    response_headers = dict(headers or {})
    retry_after = payload.get("retryAfter")
    if kind is BuildKind.RATE_LIMITED and retry_after is not None:
        response_headers.setdefault("Retry-After", str(retry_after))

    catalog = _catalog_of(request) if request is not None else DEFAULT_CATALOG
    return JSONResponse(
        status_code=status_code,
        content=build_payload(kind, payload, catalog=catalog),
        headers=response_headers or None,
    )


def _settings_of(request: Request) -> EnvelopeGuardSettings:
    settings = getattr(request.app.state, "envelope_guard_settings", None)
    return settings if isinstance(settings, EnvelopeGuardSettings) else EnvelopeGuardSettings()


def _catalog_of(request: Request) -> StatusCatalog:
    catalog = getattr(request.app.state, "envelope_guard_catalog", None)
    return catalog if isinstance(catalog, StatusCatalog) else DEFAULT_CATALOG


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError subclasses."""
    fields: dict[str, Any] = {"code": exc.code, "message": exc.message, **exc.error_fields()}
    if exc.meta:
        fields["meta"] = exc.meta
    return error_response(exc.status_code, fields, request=request, settings=_settings_of(request))


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    details = [
        {
            # Drop the leading "body"/"query"/"path" location segment.
            "field": ".".join(str(loc) for loc in (err["loc"][1:] or err["loc"])) or "request",
            "message": err["msg"] or "invalid value",
        }
        for err in exc.errors()
    ]
    return error_response(
        422,
        {"details": details},
        request=request,
        settings=_settings_of(request),
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Handle Starlette HTTPException (unknown routes, disallowed methods, ...)."""
    logger.warning(
        "HTTP exception %d on %s",
        exc.status_code,
        request.url.path,
        extra={"status": exc.status_code, "path": request.url.path},
    )
    if exc.status_code < 400:
        # Not an error envelope; let the status and headers through untouched.
        return Response(status_code=exc.status_code, headers=exc.headers)
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else None
    return error_response(
        exc.status_code,
        {"message": message},
        request=request,
        settings=_settings_of(request),
        headers=exc.headers,
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: log the traceback, return a generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
        extra={"request_id": _request_id(request), "path": request.url.path},
    )
    return error_response(500, request=request, settings=_settings_of(request))


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(ApiError, _api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
