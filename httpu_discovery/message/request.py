"""HTTPU request model and encoder.

The encoder writes a deliberate subset of an HTTP/1.1 request: the request
line, the caller's headers and the terminating blank line. Nothing else is
added (no Host, User-Agent or Content-Length), since constrained listeners
such as SSDP devices can be confused by extra fields.
"""

import io
from dataclasses import dataclass, field
from typing import Union

from ..errors import EncodeError
from .headers import HeaderMap, HeaderSource

# Wire encoding for request lines and header fields.
ENCODING = "latin-1"

DEFAULT_METHOD = "GET"


@dataclass(frozen=True)
class Request:
    """An outbound HTTPU request.

    Attributes:
        method: Request method. Empty means GET.
        target: Request target written on the request line (e.g. ``*``).
        host: Destination ``host:port`` the datagrams are sent to.
        headers: Header fields, converted to a HeaderMap. Compared for
            equality but left out of the hash.
    """
    method: str
    target: str
    host: str
    headers: Union[HeaderMap, HeaderSource] = field(default_factory=HeaderMap, hash=False)

    def __post_init__(self):
        if not isinstance(self.headers, HeaderMap):
            object.__setattr__(self, "headers", HeaderMap(self.headers))

    @property
    def effective_method(self) -> str:
        return self.method or DEFAULT_METHOD

    @property
    def request_uri(self) -> str:
        return self.target or "/"

    @property
    def request_line(self) -> str:
        return f"{self.effective_method} {self.request_uri} HTTP/1.1"


def encode_request(request: Request) -> bytes:
    """Serialize a request into the bytes of a single datagram.

    Args:
        request: Request to encode.

    Returns:
        ``<METHOD> <TARGET> HTTP/1.1\\r\\n`` followed by the header lines and
        a blank line. No body is ever appended.

    Raises:
        EncodeError: If writing the buffer fails, e.g. a header value holds
            characters outside ISO-8859-1.
    """
    buf = io.BytesIO()
    try:
        buf.write(f"{request.request_line}\r\n".encode(ENCODING))
        request.headers.write(buf, ENCODING)
        buf.write(b"\r\n")
    except (OSError, ValueError) as e:
        raise EncodeError(f"httpu: failed to encode request: {e}") from e
    return buf.getvalue()
