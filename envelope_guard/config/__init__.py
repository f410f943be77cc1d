"""Configuration module."""

from envelope_guard.config.settings import EnvelopeGuardSettings

__all__ = ["EnvelopeGuardSettings"]
