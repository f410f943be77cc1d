"""Envelope validation."""

from envelope_guard.validator.envelope_validator import EnvelopeValidator, validate

__all__ = ["EnvelopeValidator", "validate"]
