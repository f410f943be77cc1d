"""Public models for envelope-guard."""

from envelope_guard.models.envelope import (
    ERROR_CODE_PATTERN,
    Envelope,
    ErrorBody,
    ErrorDetail,
    ErrorEnvelope,
    PaginationMeta,
    SuccessEnvelope,
    to_payload,
)
from envelope_guard.models.violations import (
    Severity,
    ValidationResult,
    Violation,
    ViolationKind,
)

__all__ = [
    "ERROR_CODE_PATTERN",
    "Envelope",
    "ErrorBody",
    "ErrorDetail",
    "ErrorEnvelope",
    "PaginationMeta",
    "Severity",
    "SuccessEnvelope",
    "ValidationResult",
    "Violation",
    "ViolationKind",
    "to_payload",
]
