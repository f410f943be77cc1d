"""Response envelope models.

Every API response is wrapped in one of two shapes::

    { success: true,  status, message?, data?, meta? }
    { success: false, status, error: { code, message, details?, retryAfter?,
                                       resetAt?, requestId? }, meta? }

The ``success`` literal tags the variant; each model also rejects a status
whose category disagrees with it, so an inconsistent envelope cannot be
constructed.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from envelope_guard.catalog.status_catalog import classify

ERROR_CODE_PATTERN = r"^[A-Z0-9_]+$"


class ErrorDetail(BaseModel):
    """A single field-level validation problem."""

    field: str = Field(min_length=1)
    message: str = Field(min_length=1)


class ErrorBody(BaseModel):
    """The ``error`` object of a failed response."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    code: str = Field(min_length=1, pattern=ERROR_CODE_PATTERN)
    message: str = Field(min_length=1)
    details: list[ErrorDetail] | None = None
    retry_after: int | None = Field(default=None, ge=0, alias="retryAfter")
    reset_at: str | int | None = Field(default=None, alias="resetAt")
    request_id: str | None = Field(default=None, alias="requestId")


class PaginationMeta(BaseModel):
    """Pagination block carried in ``meta`` for list endpoints."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0, alias="totalPages")
    timestamp: str | None = None


class SuccessEnvelope(BaseModel):
    """Envelope for 1xx/2xx/3xx responses."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    status: int = 200
    message: str | None = None
    data: Any = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _status_is_successful(self) -> SuccessEnvelope:
        if classify(self.status).expects_success is not True:
            raise ValueError(f"status {self.status} cannot carry a success envelope")
        return self


class ErrorEnvelope(BaseModel):
    """Envelope for 4xx/5xx responses."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[False] = False
    status: int
    error: ErrorBody
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _status_is_failure(self) -> ErrorEnvelope:
        if classify(self.status).expects_success is not False:
            raise ValueError(f"status {self.status} cannot carry an error envelope")
        return self


Envelope = Union[SuccessEnvelope, ErrorEnvelope]


def _without_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def to_payload(envelope: Envelope) -> dict[str, Any]:
    """Serialize an envelope to the JSON-ready dict sent on the wire.

    Unset optional keys are omitted at the envelope and ``error`` levels;
    ``None`` values inside caller-supplied ``data`` or ``meta`` are kept.
    """
    payload = _without_none(envelope.model_dump(mode="json", by_alias=True))
    if isinstance(payload.get("error"), dict):
        payload["error"] = _without_none(payload["error"])
    return payload
