"""Probe module - YAML probe file parsing."""

from .schema import (
    ExchangeSettings,
    Probe,
    ProbeRequest,
    ValidationError,
    ValidationResult,
)
from .parser import parse_probe, parse_probe_data
from .validator import validate_probe

__all__ = [
    "ExchangeSettings",
    "Probe",
    "ProbeRequest",
    "ValidationError",
    "ValidationResult",
    "parse_probe",
    "parse_probe_data",
    "validate_probe",
]
