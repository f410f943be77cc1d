"""Envelope validator.

Checks a candidate response body against the success/error envelope
convention for the status code it is sent with. Validation never raises on
malformed input: every deviation is collected as a ``Violation`` so callers
can report them all at once and decide whether to reject, log, or correct.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from envelope_guard.catalog.status_catalog import DEFAULT_CATALOG, Category, StatusCatalog, classify
from envelope_guard.models.envelope import ERROR_CODE_PATTERN
from envelope_guard.models.violations import ValidationResult, Violation, ViolationKind

logger = logging.getLogger(__name__)

_DEFAULT_CODE_RE = re.compile(ERROR_CODE_PATTERN)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_nonempty_str(value: object) -> bool:
    return isinstance(value, str) and value != ""


class EnvelopeValidator:
    """Validates response envelopes against a status code.

    Instances hold only immutable configuration and may be shared freely
    between threads and requests.
    """

    def __init__(
        self,
        code_pattern: str = ERROR_CODE_PATTERN,
        catalog: StatusCatalog = DEFAULT_CATALOG,
    ) -> None:
        self.catalog = catalog
        self._code_re = _DEFAULT_CODE_RE if code_pattern == ERROR_CODE_PATTERN else re.compile(code_pattern)

    @staticmethod
    def classify(status: object) -> Category:
        return classify(status)

    def validate(self, envelope: Any, status: object) -> ValidationResult:
        """Validate ``envelope`` as the body of a ``status`` response.

        Args:
            envelope: A decoded JSON value, or an envelope model.
            status: The HTTP status code the body is sent with.

        Returns:
            A ``ValidationResult`` listing every violation found, in check order.
        """
        if isinstance(envelope, BaseModel):
            envelope = envelope.model_dump(mode="json", by_alias=True)

        violations: list[Violation] = []
        category = classify(status)
        expected = category.expects_success

        if not isinstance(envelope, Mapping):
            violations.append(
                Violation.of(
                    ViolationKind.TYPE_MISMATCH,
                    f"envelope must be a JSON object, got {type(envelope).__name__}",
                    field="$",
                )
            )
            self._check_status(category, status, violations)
            return self._finish(violations, status)

        success = envelope.get("success")
        if "success" not in envelope:
            violations.append(
                Violation.of(ViolationKind.MISSING_FIELD, "'success' is required", field="success")
            )
        elif not isinstance(success, bool):
            violations.append(
                Violation.of(
                    ViolationKind.TYPE_MISMATCH,
                    f"'success' must be a boolean, got {type(success).__name__}",
                    field="success",
                )
            )
            success = None

        self._check_status(category, status, violations)

        if isinstance(success, bool) and expected is not None and success is not expected:
            violations.append(
                Violation.of(
                    ViolationKind.SUCCESS_STATUS_MISMATCH,
                    f"status {status} ({self._describe(status, category)}) requires success={str(expected).lower()}",
                    field="success",
                )
            )

        self._check_status_field(envelope, status, violations)

        meta = envelope.get("meta")
        if meta is not None and not isinstance(meta, Mapping):
            violations.append(
                Violation.of(ViolationKind.TYPE_MISMATCH, "'meta' must be an object", field="meta")
            )

        branch = success if isinstance(success, bool) else expected
        if branch is True:
            self._check_success_body(envelope, violations)
        elif branch is False:
            self._check_error_body(envelope, violations)

        if _is_int(status) and status == 429 and not self._has_retry_info(envelope):
            violations.append(
                Violation.of(
                    ViolationKind.RATE_LIMIT_MISSING_RETRY_INFO,
                    "429 responses should include 'retryAfter' or 'resetAt'",
                )
            )

        if _is_int(status) and status == 422:
            error = envelope.get("error")
            details = error.get("details") if isinstance(error, Mapping) else None
            if not details:
                violations.append(
                    Violation.of(
                        ViolationKind.MISSING_VALIDATION_DETAILS,
                        "422 responses should list field-level 'details'",
                        field="error.details",
                    )
                )

        return self._finish(violations, status)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _describe(self, status: object, category: Category) -> str:
        info = self.catalog.describe(status) if _is_int(status) else None
        return info.meaning if info is not None else category.value

    @staticmethod
    def _check_status(category: Category, status: object, violations: list[Violation]) -> None:
        if category is Category.UNKNOWN:
            violations.append(
                Violation.of(
                    ViolationKind.UNKNOWN_STATUS,
                    f"status {status!r} is outside the 100-599 range",
                )
            )

    @staticmethod
    def _check_status_field(
        envelope: Mapping[str, Any], status: object, violations: list[Violation]
    ) -> None:
        if "status" not in envelope or envelope["status"] is None:
            return
        body_status = envelope["status"]
        if not _is_int(body_status):
            violations.append(
                Violation.of(ViolationKind.TYPE_MISMATCH, "'status' must be an integer", field="status")
            )
        elif _is_int(status) and body_status != status:
            violations.append(
                Violation.of(
                    ViolationKind.STATUS_FIELD_MISMATCH,
                    f"body status {body_status} differs from response status {status}",
                    field="status",
                )
            )

    @staticmethod
    def _check_success_body(envelope: Mapping[str, Any], violations: list[Violation]) -> None:
        if envelope.get("error") is not None:
            violations.append(
                Violation.of(
                    ViolationKind.UNEXPECTED_FIELD,
                    "successful responses must not carry 'error'",
                    field="error",
                )
            )

    def _check_error_body(self, envelope: Mapping[str, Any], violations: list[Violation]) -> None:
        if envelope.get("data") is not None:
            violations.append(
                Violation.of(
                    ViolationKind.UNEXPECTED_FIELD,
                    "error responses must not carry 'data'",
                    field="data",
                )
            )

        error = envelope.get("error")
        if error is None:
            violations.append(
                Violation.of(ViolationKind.MISSING_FIELD, "'error' is required", field="error")
            )
            return
        if not isinstance(error, Mapping):
            violations.append(
                Violation.of(ViolationKind.TYPE_MISMATCH, "'error' must be an object", field="error")
            )
            return

        code = error.get("code")
        if code is None or code == "":
            violations.append(
                Violation.of(ViolationKind.MISSING_FIELD, "'error.code' is required", field="error.code")
            )
        elif not isinstance(code, str):
            violations.append(
                Violation.of(ViolationKind.TYPE_MISMATCH, "'error.code' must be a string", field="error.code")
            )
        elif not self._code_re.fullmatch(code):
            violations.append(
                Violation.of(
                    ViolationKind.INVALID_CODE_FORMAT,
                    f"error code {code!r} must be UPPER_SNAKE_CASE",
                    field="error.code",
                )
            )

        message = error.get("message")
        if message is None or message == "":
            violations.append(
                Violation.of(
                    ViolationKind.MISSING_FIELD, "'error.message' is required", field="error.message"
                )
            )
        elif not isinstance(message, str):
            violations.append(
                Violation.of(
                    ViolationKind.TYPE_MISMATCH,
                    "'error.message' must be a string",
                    field="error.message",
                )
            )

        retry_after = error.get("retryAfter")
        if retry_after is not None and not (_is_int(retry_after) and retry_after >= 0):
            violations.append(
                Violation.of(
                    ViolationKind.TYPE_MISMATCH,
                    "'error.retryAfter' must be a non-negative integer of seconds",
                    field="error.retryAfter",
                )
            )

        request_id = error.get("requestId")
        if request_id is not None and not isinstance(request_id, str):
            violations.append(
                Violation.of(
                    ViolationKind.TYPE_MISMATCH,
                    "'error.requestId' must be a string",
                    field="error.requestId",
                )
            )

        details = error.get("details")
        if details is None:
            return
        if not isinstance(details, list):
            violations.append(
                Violation.of(
                    ViolationKind.TYPE_MISMATCH, "'error.details' must be a list", field="error.details"
                )
            )
            return
        for index, entry in enumerate(details):
            if not (
                isinstance(entry, Mapping)
                and _is_nonempty_str(entry.get("field"))
                and _is_nonempty_str(entry.get("message"))
            ):
                violations.append(
                    Violation.of(
                        ViolationKind.INVALID_DETAIL_ENTRY,
                        "detail entries need non-empty 'field' and 'message' strings",
                        field="error.details",
                        index=index,
                    )
                )

    @staticmethod
    def _has_retry_info(envelope: Mapping[str, Any]) -> bool:
        error = envelope.get("error")
        scopes = (error, envelope) if isinstance(error, Mapping) else (envelope,)
        return any(
            scope.get("retryAfter") is not None or scope.get("resetAt") is not None
            for scope in scopes
        )

    @staticmethod
    def _finish(violations: list[Violation], status: object) -> ValidationResult:
        result = ValidationResult(violations=tuple(violations))
        if violations:
            logger.debug(
                "Envelope for status %s has %d violation(s)",
                status,
                len(violations),
                extra={"status": status, "violations": [v.kind.value for v in violations]},
            )
        return result


_default_validator = EnvelopeValidator()


def validate(envelope: Any, status: object) -> ValidationResult:
    """Validate ``envelope`` with the default validator."""
    return _default_validator.validate(envelope, status)
