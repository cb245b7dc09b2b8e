"""SSDP M-SEARCH requests and results."""

from dataclasses import dataclass
from typing import Any, Optional

from ..discovery.client import HTTPUClient
from ..message.request import Request
from ..message.response import Response

SSDP_ADDR = "239.255.255.250"
SSDP_PORT = 1900
SSDP_HOST = f"{SSDP_ADDR}:{SSDP_PORT}"

ST_ALL = "ssdp:all"
ST_ROOT_DEVICE = "upnp:rootdevice"

DEFAULT_MX = 2
DEFAULT_NUM_SENDS = 2


def msearch_request(
    search_target: str = ST_ALL,
    mx: int = DEFAULT_MX,
    host: str = SSDP_HOST,
) -> Request:
    """Build an M-SEARCH request.

    Args:
        search_target: ST header value.
        mx: Maximum seconds a device may wait before answering.
        host: Destination host:port, also sent as the HOST header.
    """
    return Request(
        method="M-SEARCH",
        target="*",
        host=host,
        headers={
            "HOST": host,
            "MAN": '"ssdp:discover"',
            "MX": str(mx),
            "ST": search_target,
        },
    )


@dataclass
class SearchResult:
    """One M-SEARCH answer."""
    location: Optional[str]
    st: Optional[str]
    usn: Optional[str]
    server: Optional[str] = None
    cache_control: Optional[str] = None
    remote_addr: Optional[tuple[str, int]] = None
    response: Optional[Response] = None

    @classmethod
    def from_response(cls, response: Response) -> "SearchResult":
        return cls(
            location=response.header("LOCATION"),
            st=response.header("ST"),
            usn=response.header("USN"),
            server=response.header("SERVER"),
            cache_control=response.header("CACHE-CONTROL"),
            remote_addr=response.remote_addr,
            response=response,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "remote_addr": (
                f"{self.remote_addr[0]}:{self.remote_addr[1]}" if self.remote_addr else None
            ),
            "location": self.location,
            "st": self.st,
            "usn": self.usn,
            "server": self.server,
            "cache_control": self.cache_control,
        }

    def __str__(self) -> str:
        return f"{self.usn or '<no USN>'} at {self.location or '<no LOCATION>'}"


def search(
    client: HTTPUClient,
    search_target: str = ST_ALL,
    mx: int = DEFAULT_MX,
    timeout: Optional[float] = None,
    num_sends: int = DEFAULT_NUM_SENDS,
    host: str = SSDP_HOST,
) -> list[SearchResult]:
    """Send an M-SEARCH and return every answer received.

    Args:
        client: Client to run the exchange on.
        search_target: ST header value.
        mx: MX header value.
        timeout: Collection window in seconds. Default: mx + 1.
        num_sends: Number of send rounds.
        host: Destination host:port.

    Returns:
        One SearchResult per parsed response, in arrival order.
    """
    if timeout is None:
        timeout = mx + 1
    request = msearch_request(search_target, mx, host)
    responses = client.exchange(request, timeout, num_sends)
    return [SearchResult.from_response(r) for r in responses]
