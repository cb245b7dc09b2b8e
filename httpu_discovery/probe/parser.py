"""YAML probe parser.

Parses probe files such as::

    name: ssdp-root-devices
    request:
      method: M-SEARCH
      target: "*"
      host: 239.255.255.250:1900
      headers:
        HOST: 239.255.255.250:1900
        MAN: '"ssdp:discover"'
        MX: 2
        ST: upnp:rootdevice
    exchange:
      timeout: 3
      num_sends: 2
"""

from pathlib import Path
from typing import Union

import yaml

from .schema import ExchangeSettings, Probe, ProbeRequest


def parse_probe(file_path: Union[str, Path]) -> Probe:
    """Parse a YAML probe file into a Probe object.

    Args:
        file_path: Path to the YAML probe file.

    Returns:
        Parsed Probe object.

    Raises:
        FileNotFoundError: If the probe file doesn't exist.
        ValueError: If the YAML is malformed or missing required fields.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Probe file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty probe file: {file_path}")

    return parse_probe_data(data, source=str(file_path))


def parse_probe_data(data: dict, source: str = "<inline>") -> Probe:
    """Parse a probe from a dictionary (already loaded YAML).

    Args:
        data: Dictionary with probe data.
        source: Source identifier for error messages.

    Returns:
        Parsed Probe object.

    Raises:
        ValueError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Probe must be a YAML mapping, got {type(data).__name__}")

    _require_fields(data, ["name", "request"], "probe", source)

    request_data = data["request"]
    if not isinstance(request_data, dict):
        raise ValueError(f"'request' must be a mapping in {source}")
    _require_fields(request_data, ["host"], "request", source)

    headers = _parse_headers(request_data.get("headers") or {}, source)
    request = ProbeRequest(
        host=str(request_data["host"]),
        method=str(request_data.get("method") or "GET"),
        target=str(request_data.get("target") or "/"),
        headers=headers,
    )

    exchange_data = data.get("exchange") or {}
    if not isinstance(exchange_data, dict):
        raise ValueError(f"'exchange' must be a mapping in {source}")
    try:
        exchange = ExchangeSettings(**{
            k: (float(v) if k == "timeout" else int(v))
            for k, v in exchange_data.items()
            if k in ExchangeSettings.__dataclass_fields__
        })
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid 'exchange' settings in {source}: {e}") from e

    return Probe(
        name=str(data["name"]),
        request=request,
        exchange=exchange,
        describe=bool(data.get("describe", False)),
        description=str(data.get("description") or ""),
    )


def _parse_headers(headers_data, source: str) -> dict[str, list[str]]:
    """Normalize header values to lists of strings."""
    if not isinstance(headers_data, dict):
        raise ValueError(f"'request.headers' must be a mapping in {source}")

    headers: dict[str, list[str]] = {}
    for name, value in headers_data.items():
        values = value if isinstance(value, list) else [value]
        for v in values:
            if isinstance(v, (dict, list)) or v is None:
                raise ValueError(
                    f"Header '{name}' must be a scalar or list of scalars in {source}"
                )
        headers[str(name)] = [str(v) for v in values]
    return headers


def _require_fields(
    data: dict, fields: list[str], context: str, source: str
) -> None:
    """Check that required fields exist in a dictionary."""
    for field_name in fields:
        if field_name not in data:
            raise ValueError(
                f"Missing required field '{field_name}' in {context} ({source})"
            )
