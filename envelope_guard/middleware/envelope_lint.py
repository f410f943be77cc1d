"""Response envelope linting middleware.

Validates every outgoing JSON body against the envelope convention for its
status code. In ``log`` mode violations are logged and the response passes
through; in ``reject`` mode a response with Error-severity violations is
replaced by a 500 ``INVALID_RESPONSE_ENVELOPE`` envelope.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from envelope_guard.builder import BuildKind, build_payload
from envelope_guard.models.violations import ValidationResult
from envelope_guard.validator.envelope_validator import EnvelopeValidator

logger = logging.getLogger(__name__)

INVALID_ENVELOPE_CODE = "INVALID_RESPONSE_ENVELOPE"


def default_exclude_paths(app: FastAPI) -> frozenset[str]:
    """Paths FastAPI serves itself (OpenAPI schema and docs UIs)."""
    paths = {app.openapi_url, app.docs_url, app.redoc_url}
    if app.docs_url:
        paths.add(app.docs_url + "/oauth2-redirect")
    return frozenset(path for path in paths if path)


def _is_json(response: Response) -> bool:
    content_type = response.headers.get("content-type", "")
    return content_type.split(";")[0].strip().endswith("json")


class EnvelopeLintMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that lints JSON response envelopes."""

    def __init__(
        self,
        app: ASGIApp,
        mode: str = "log",
        validator: EnvelopeValidator | None = None,
        exclude_paths: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        if mode not in ("off", "log", "reject"):
            raise ValueError(f"unsupported lint mode: {mode!r}")
        self.mode = mode
        self.validator = validator or EnvelopeValidator()
        self.exclude_paths = frozenset(exclude_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        if self.mode == "off" or request.url.path in self.exclude_paths or not _is_json(response):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])  # type: ignore[attr-defined]
        try:
            decoded = json.loads(body) if body else None
        except ValueError:
            decoded = body.decode("utf-8", errors="replace")

        result = self.validator.validate(decoded, response.status_code)
        if result.violations:
            self._log(request, response.status_code, result)

        if self.mode == "reject" and not result.ok:
            return JSONResponse(
                status_code=500,
                content=build_payload(
                    BuildKind.SERVER_ERROR,
                    {
                        "code": INVALID_ENVELOPE_CODE,
                        "message": "Response failed envelope validation",
                        "requestId": getattr(request.state, "request_id", None),
                    },
                ),
                background=response.background,
            )

        passthrough = Response(
            content=body,
            status_code=response.status_code,
            background=response.background,
        )
        # raw headers keep repeated entries such as several Set-Cookie lines
        passthrough.raw_headers = response.raw_headers
        return passthrough

    def _log(self, request: Request, status: int, result: ValidationResult) -> None:
        extra = {
            "status": status,
            "path": request.url.path,
            "violations": [v.kind.value for v in result.violations],
            "lint_mode": self.mode,
        }
        if result.ok:
            logger.warning(
                "Response envelope for %s has %d warning(s)",
                request.url.path,
                len(result.warnings),
                extra=extra,
            )
        else:
            logger.error(
                "Response envelope for %s violates the convention: %s",
                request.url.path,
                ", ".join(v.kind.value for v in result.errors),
                extra=extra,
            )
