"""Violation and validation result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    """Errors block acceptance; warnings are advisory."""

    ERROR = "error"
    WARNING = "warning"


class ViolationKind(str, Enum):
    """Kinds of deviation from the documented envelope shape."""

    TYPE_MISMATCH = "TYPE_MISMATCH"
    UNKNOWN_STATUS = "UNKNOWN_STATUS"
    SUCCESS_STATUS_MISMATCH = "SUCCESS_STATUS_MISMATCH"
    UNEXPECTED_FIELD = "UNEXPECTED_FIELD"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_CODE_FORMAT = "INVALID_CODE_FORMAT"
    INVALID_DETAIL_ENTRY = "INVALID_DETAIL_ENTRY"
    RATE_LIMIT_MISSING_RETRY_INFO = "RATE_LIMIT_MISSING_RETRY_INFO"
    MISSING_VALIDATION_DETAILS = "MISSING_VALIDATION_DETAILS"
    STATUS_FIELD_MISMATCH = "STATUS_FIELD_MISMATCH"

    @property
    def severity(self) -> Severity:
        if self in _WARNING_KINDS:
            return Severity.WARNING
        return Severity.ERROR


_WARNING_KINDS = frozenset(
    {
        ViolationKind.RATE_LIMIT_MISSING_RETRY_INFO,
        ViolationKind.MISSING_VALIDATION_DETAILS,
        ViolationKind.STATUS_FIELD_MISMATCH,
    }
)


class Violation(BaseModel):
    """A single detected deviation, tagged with kind and severity."""

    model_config = ConfigDict(frozen=True)

    kind: ViolationKind
    severity: Severity
    message: str
    field: str | None = None
    index: int | None = None

    @classmethod
    def of(
        cls,
        kind: ViolationKind,
        message: str,
        *,
        field: str | None = None,
        index: int | None = None,
    ) -> Violation:
        return cls(kind=kind, severity=kind.severity, message=message, field=field, index=index)


class ValidationResult(BaseModel):
    """Outcome of validating one envelope.

    ``ok`` is true when no violation has ``Severity.ERROR``; warnings are
    still listed in ``violations`` so callers can report them.
    """

    model_config = ConfigDict(frozen=True)

    violations: tuple[Violation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if v.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if v.severity is Severity.WARNING)

    @property
    def kinds(self) -> list[ViolationKind]:
        return [v.kind for v in self.violations]

    def __bool__(self) -> bool:
        return self.ok
