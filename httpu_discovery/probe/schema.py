"""Probe data models.

A probe file describes one exchange: the request to send and how long and
how often to send it.
"""

from dataclasses import dataclass, field
from typing import Any

from ..message.request import Request

DEFAULT_TIMEOUT = 3.0
DEFAULT_NUM_SENDS = 2


@dataclass
class ProbeRequest:
    """The request part of a probe."""
    host: str
    method: str = "GET"
    target: str = "/"
    headers: dict[str, list[str]] = field(default_factory=dict)

    def __post_init__(self):
        self.method = self.method.upper()


@dataclass
class ExchangeSettings:
    """Timing of a probe's exchange."""
    timeout: float = DEFAULT_TIMEOUT
    num_sends: int = DEFAULT_NUM_SENDS


@dataclass
class Probe:
    """A complete probe definition."""
    name: str
    request: ProbeRequest
    exchange: ExchangeSettings = field(default_factory=ExchangeSettings)
    describe: bool = False
    description: str = ""

    def to_request(self) -> Request:
        return Request(
            method=self.request.method,
            target=self.request.target,
            host=self.request.host,
            headers=self.request.headers,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert probe to dictionary for serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "request": {
                "method": self.request.method,
                "target": self.request.target,
                "host": self.request.host,
                "headers": self.request.headers,
            },
            "exchange": {
                "timeout": self.exchange.timeout,
                "num_sends": self.exchange.num_sends,
            },
            "describe": self.describe,
        }


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of probe validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
