"""Pydantic Settings for the envelope-guard FastAPI integration.

All environment variables use the ENVELOPE_GUARD_ prefix.
Example: ENVELOPE_GUARD_LINT_MODE=reject, ENVELOPE_GUARD_LOG_LEVEL=DEBUG

The core ``validate`` / ``build`` functions never read these settings.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class EnvelopeGuardSettings(BaseSettings):
    """Integration configuration validated from environment variables."""

    log_level: str = "INFO"

    # Response linting: off | log | reject
    lint_mode: Literal["off", "log", "reject"] = "log"
    # Paths never linted; None means the app's OpenAPI and docs routes
    lint_exclude_paths: list[str] | None = None

    # 429 envelopes
    default_retry_after_seconds: int = Field(default=60, ge=0)

    # 500 envelopes
    expose_request_id: bool = True

    # Extra / overriding status codes layered over the bundled catalog
    status_catalog_path: str | None = None

    model_config = {"env_prefix": "ENVELOPE_GUARD_"}
