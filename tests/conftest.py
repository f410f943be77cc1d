"""Shared test fixtures for the envelope-guard test suite."""

from __future__ import annotations

import os

import pytest

from envelope_guard.config.settings import EnvelopeGuardSettings
from envelope_guard.validator.envelope_validator import EnvelopeValidator


# ---------------------------------------------------------------------------
# Keep ENVELOPE_GUARD_* env vars from leaking into tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any ENVELOPE_GUARD_ env vars so settings use their defaults."""
    for key in list(os.environ):
        if key.startswith("ENVELOPE_GUARD_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> EnvelopeGuardSettings:
    """Test settings with safe defaults."""
    return EnvelopeGuardSettings(lint_mode="log", default_retry_after_seconds=30)


@pytest.fixture
def validator() -> EnvelopeValidator:
    return EnvelopeValidator()
