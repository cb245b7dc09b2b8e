"""Device description fetcher.

Follows the LOCATION header of an SSDP answer and reads the UPnP device
description XML it points at.
"""

import logging
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import requests

from ..discovery.policy import RetryPolicy, default_retry_policy

log = logging.getLogger(__name__)


@dataclass
class DeviceDescription:
    """Fields read from a UPnP device description document."""
    location: str
    status_code: int
    friendly_name: Optional[str] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    udn: Optional[str] = None
    content_type: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "status_code": self.status_code,
            "friendly_name": self.friendly_name,
            "manufacturer": self.manufacturer,
            "model_name": self.model_name,
            "udn": self.udn,
        }


class DescriptionFetcher:
    """HTTP client for device description documents."""

    def __init__(
        self,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize fetcher.

        Args:
            retry_policy: Retry policy for failed requests.
            request_timeout: Per-request timeout in seconds.
            session: requests session to use. Default: a new one.
        """
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_timeout = request_timeout
        self._session = session or requests.Session()

    def fetch(self, location: str) -> DeviceDescription:
        """Fetch and parse one device description.

        Raises:
            requests.RequestException: After all retries are exhausted.
        """
        response = self._request_with_retry(location)
        description = DeviceDescription(
            location=location,
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type"),
        )
        _fill_from_xml(description, response.content)
        return description

    def fetch_all(self, locations: Iterable[Optional[str]]) -> dict[str, DeviceDescription]:
        """Fetch every distinct location, skipping the ones that fail."""
        descriptions: dict[str, DeviceDescription] = {}
        for location in locations:
            if not location or location in descriptions:
                continue
            try:
                descriptions[location] = self.fetch(location)
            except requests.RequestException as e:
                log.warning("httpu: failed to fetch description from %s: %s", location, e)
        return descriptions

    def _request_with_retry(self, url: str) -> requests.Response:
        """GET with retry on connection errors, timeouts and 5xx responses."""
        for attempt in range(self.retry_policy.max_retries + 1):
            retries_left = attempt < self.retry_policy.max_retries
            try:
                response = self._session.get(url, timeout=self.request_timeout)
            except (requests.ConnectionError, requests.Timeout):
                if not retries_left:
                    raise
            else:
                if response.status_code < 500 or not retries_left:
                    response.raise_for_status()
                    return response
            time.sleep(self.retry_policy.get_delay(attempt))
        # Should not reach here
        raise RuntimeError("Request failed with no response captured")

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _fill_from_xml(description: DeviceDescription, content: bytes) -> None:
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        log.debug("httpu: description at %s is not XML: %s", description.location, e)
        return

    # First <device> element, namespaces ignored.
    device = next((el for el in root.iter() if _local(el.tag) == "device"), None)
    if device is None:
        return
    fields = {_local(child.tag): (child.text or "").strip() for child in device}
    description.friendly_name = fields.get("friendlyName") or None
    description.manufacturer = fields.get("manufacturer") or None
    description.model_name = fields.get("modelName") or None
    description.udn = fields.get("UDN") or None


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]
