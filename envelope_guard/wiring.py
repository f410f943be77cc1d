"""Attach envelope-guard to a FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from envelope_guard.catalog.status_catalog import load_status_catalog
from envelope_guard.config.settings import EnvelopeGuardSettings
from envelope_guard.logging_config import configure_logging
from envelope_guard.middleware.envelope_lint import EnvelopeLintMiddleware, default_exclude_paths
from envelope_guard.middleware.error_handler import register_error_handlers
from envelope_guard.middleware.request_id import RequestIdMiddleware
from envelope_guard.validator.envelope_validator import EnvelopeValidator

logger = logging.getLogger(__name__)


def install(
    app: FastAPI,
    settings: EnvelopeGuardSettings | None = None,
    *,
    configure_logs: bool = False,
) -> EnvelopeGuardSettings:
    """Register exception handlers and middleware on ``app``.

    Middleware order (outermost first): request ID, then envelope linting,
    so lint logs and rejection envelopes carry the request ID.

    With ``configure_logs`` the root logger is switched to JSON output at
    ``settings.log_level``. Returns the settings in effect.
    """
    settings = settings or EnvelopeGuardSettings()
    if configure_logs:
        configure_logging(settings.log_level)

    app.state.envelope_guard_settings = settings
    app.state.envelope_guard_catalog = load_status_catalog(settings.status_catalog_path)

    register_error_handlers(app)
    if settings.lint_mode != "off":
        exclude_paths = settings.lint_exclude_paths
        if exclude_paths is None:
            exclude_paths = default_exclude_paths(app)
        app.add_middleware(
            EnvelopeLintMiddleware,
            mode=settings.lint_mode,
            validator=EnvelopeValidator(catalog=app.state.envelope_guard_catalog),
            exclude_paths=exclude_paths,
        )
    # Added last so it wraps the lint middleware.
    app.add_middleware(RequestIdMiddleware)

    logger.info(
        "envelope-guard installed (lint_mode=%s, catalog=%d codes)",
        settings.lint_mode,
        len(app.state.envelope_guard_catalog),
    )
    return settings
