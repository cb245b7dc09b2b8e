"""Probe validator.

Validates parsed Probe objects before any packet is sent.
"""

import ipaddress

from ..errors import AddressResolutionError
from ..transport.address import split_host_port
from .schema import Probe, ValidationError, ValidationResult

# Collection windows longer than this are almost always a typo (ms vs s).
MAX_REASONABLE_TIMEOUT = 30.0


def validate_probe(probe: Probe) -> ValidationResult:
    """Validate a parsed Probe object.

    Checks:
    - Name is present
    - Request method and destination host:port
    - Exchange timeout and send count

    Args:
        probe: Parsed Probe to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if not probe.name:
        errors.append(ValidationError(
            path="name",
            message="'name' is required and must not be empty.",
        ))

    _validate_request(probe, errors, warnings)
    _validate_exchange(probe, errors, warnings)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_request(
    probe: Probe,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    request = probe.request

    if not request.method or any(c.isspace() for c in request.method):
        errors.append(ValidationError(
            path="request.method",
            message=f"Invalid method '{request.method}'. Must be a single token.",
        ))

    if any(c.isspace() for c in request.target):
        errors.append(ValidationError(
            path="request.target",
            message=f"Invalid target '{request.target}'. Must not contain whitespace.",
        ))

    try:
        host, port = split_host_port(request.host)
    except AddressResolutionError:
        errors.append(ValidationError(
            path="request.host",
            message=f"Invalid host '{request.host}'. Expected 'HOST:PORT' (e.g., '239.255.255.250:1900').",
        ))
        return

    if not port.isdigit() or not 0 < int(port) <= 65535:
        errors.append(ValidationError(
            path="request.host",
            message=f"Invalid port '{port}'. Must be an integer between 1 and 65535.",
        ))

    if _is_multicast(host) and not any(name.lower() == "host" for name in request.headers):
        warnings.append(ValidationError(
            path="request.headers",
            message="Multicast destination without a 'HOST' header. Most SSDP listeners require one.",
            severity="warning",
        ))


def _validate_exchange(
    probe: Probe,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    exchange = probe.exchange

    if exchange.timeout <= 0:
        errors.append(ValidationError(
            path="exchange.timeout",
            message=f"Timeout must be positive, got {exchange.timeout}.",
        ))
    elif exchange.timeout > MAX_REASONABLE_TIMEOUT:
        warnings.append(ValidationError(
            path="exchange.timeout",
            message=f"Timeout of {exchange.timeout}s is unusually long for discovery.",
            severity="warning",
        ))

    if exchange.num_sends < 1:
        errors.append(ValidationError(
            path="exchange.num_sends",
            message=f"num_sends must be at least 1, got {exchange.num_sends}.",
        ))


def _is_multicast(host: str) -> bool:
    try:
        return ipaddress.ip_address(host).is_multicast
    except ValueError:
        return False
