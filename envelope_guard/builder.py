"""Canonical envelope constructors.

``build`` encodes the documented shapes for the common cases so services do
not hand-assemble them::

    build(BuildKind.SUCCESS, {"data": {"id": 1}})
    build(BuildKind.RATE_LIMITED, {"retryAfter": 30})
    build(BuildKind.SERVER_ERROR, {"requestId": "req_abc123"})
    build(BuildKind.VALIDATION_ERROR, {"details": [{"field": "email", "message": "Email is required"}]})
    build(BuildKind.GENERIC, {"status": 404})

All functions here are pure: no I/O, no clocks, no random identifiers.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import ValidationError

from envelope_guard.catalog.status_catalog import DEFAULT_CATALOG, StatusCatalog
from envelope_guard.models.envelope import (
    Envelope,
    ErrorEnvelope,
    PaginationMeta,
    SuccessEnvelope,
    to_payload,
)


class EnvelopeBuildError(ValueError):
    """Raised when a payload cannot form a consistent envelope."""


class BuildKind(str, Enum):
    """Envelope shapes ``build`` knows how to construct."""

    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    VALIDATION_ERROR = "validation_error"
    GENERIC = "generic"


_DEFAULT_STATUS: dict[BuildKind, int] = {
    BuildKind.SUCCESS: 200,
    BuildKind.RATE_LIMITED: 429,
    BuildKind.SERVER_ERROR: 500,
    BuildKind.VALIDATION_ERROR: 422,
    BuildKind.GENERIC: 400,
}

_ERROR_DEFAULTS: dict[BuildKind, dict[str, Any]] = {
    BuildKind.RATE_LIMITED: {
        "code": "RATE_LIMIT_EXCEEDED",
        "message": "Too many requests. Please try again later.",
        "retryAfter": 60,
    },
    BuildKind.SERVER_ERROR: {
        "code": "INTERNAL_SERVER_ERROR",
        "message": "An unexpected error occurred",
    },
    BuildKind.VALIDATION_ERROR: {
        "code": "VALIDATION_ERROR",
        "message": "Invalid input data",
        "details": [],
    },
}

_SUCCESS_KEYS = frozenset({"status", "message", "data", "meta"})

# snake_case spellings accepted for the camelCase wire keys
_ERROR_KEY_ALIASES = {
    "retry_after": "retryAfter",
    "reset_at": "resetAt",
    "request_id": "requestId",
}


def status_for(kind: BuildKind) -> int:
    """Default HTTP status for envelopes of ``kind``."""
    return _DEFAULT_STATUS[BuildKind(kind)]


def _generic_defaults(status: int, catalog: StatusCatalog) -> dict[str, Any]:
    info = catalog.describe(status)
    message = info.meaning.split(" - ")[0] if info is not None else "Request failed"
    return {"code": catalog.error_code_for(status), "message": message}


def build(
    kind: BuildKind,
    payload: Mapping[str, Any] | None = None,
    *,
    catalog: StatusCatalog = DEFAULT_CATALOG,
) -> Envelope:
    """Construct the canonical envelope for ``kind``.

    Args:
        kind: Which canonical shape to build.
        payload: Envelope fields overriding the defaults. For ``SUCCESS``:
            ``status``, ``message``, ``data``, ``meta``. For the error kinds:
            ``status``, ``meta`` and any ``error`` field (``code``,
            ``message``, ``details``, ``retryAfter``, ``resetAt``,
            ``requestId``; snake_case spellings are accepted too).
        catalog: Status catalog used to derive ``GENERIC`` codes and messages.

    Raises:
        EnvelopeBuildError: the payload contradicts the kind, e.g. a 2xx
            status for an error kind, a malformed code, or ``data`` on an
            error envelope.
    """
    kind = BuildKind(kind)
    fields = dict(payload or {})
    if "success" in fields:
        raise EnvelopeBuildError("'success' is derived from the kind and cannot be supplied")

    try:
        if kind is BuildKind.SUCCESS:
            unknown = set(fields) - _SUCCESS_KEYS
            if unknown:
                raise EnvelopeBuildError(f"unsupported success envelope keys: {sorted(unknown)}")
            return SuccessEnvelope.model_validate({"status": _DEFAULT_STATUS[kind], **fields})

        if "data" in fields:
            raise EnvelopeBuildError("error envelopes cannot carry 'data'")
        if "error" in fields:
            raise EnvelopeBuildError("pass error fields at the top level of the payload, not under 'error'")
        status = fields.pop("status", _DEFAULT_STATUS[kind])
        meta = fields.pop("meta", None)
        overrides = {_ERROR_KEY_ALIASES.get(key, key): value for key, value in fields.items()}

        if kind is BuildKind.GENERIC:
            defaults = _generic_defaults(status, catalog) if isinstance(status, int) else {}
        else:
            defaults = _ERROR_DEFAULTS[kind]

        error = {**defaults, **overrides}
        return ErrorEnvelope.model_validate({"status": status, "error": error, "meta": meta})
    except ValidationError as exc:
        raise EnvelopeBuildError(f"cannot build {kind.value} envelope: {exc}") from exc


def build_payload(
    kind: BuildKind,
    payload: Mapping[str, Any] | None = None,
    *,
    catalog: StatusCatalog = DEFAULT_CATALOG,
) -> dict[str, Any]:
    """``build`` followed by wire serialization."""
    return to_payload(build(kind, payload, catalog=catalog))


def pagination_meta(
    page: int,
    limit: int,
    total: int,
    timestamp: str | None = None,
) -> dict[str, Any]:
    """The ``meta`` block for a paginated list response.

    ``totalPages`` is ``ceil(total / limit)``.
    """
    try:
        meta = PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if limit > 0 else 0,
            timestamp=timestamp,
        )
    except ValidationError as exc:
        raise EnvelopeBuildError(f"invalid pagination: {exc}") from exc
    return meta.model_dump(by_alias=True, exclude_none=True)
