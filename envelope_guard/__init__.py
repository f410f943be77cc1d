"""Validate and build HTTP API response envelopes."""

from envelope_guard.builder import (
    BuildKind,
    EnvelopeBuildError,
    build,
    build_payload,
    pagination_meta,
    status_for,
)
from envelope_guard.catalog import (
    Category,
    StatusCatalog,
    StatusInfo,
    classify,
    load_status_catalog,
)
from envelope_guard.models import (
    ErrorBody,
    ErrorDetail,
    ErrorEnvelope,
    Severity,
    SuccessEnvelope,
    ValidationResult,
    Violation,
    ViolationKind,
    to_payload,
)
from envelope_guard.validator import EnvelopeValidator, validate

__version__ = "0.1.0"

__all__ = [
    "BuildKind",
    "Category",
    "EnvelopeBuildError",
    "EnvelopeValidator",
    "ErrorBody",
    "ErrorDetail",
    "ErrorEnvelope",
    "Severity",
    "StatusCatalog",
    "StatusInfo",
    "SuccessEnvelope",
    "ValidationResult",
    "Violation",
    "ViolationKind",
    "build",
    "build_payload",
    "classify",
    "load_status_catalog",
    "pagination_meta",
    "status_for",
    "to_payload",
    "validate",
]
