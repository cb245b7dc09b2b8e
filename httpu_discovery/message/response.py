"""HTTPU response model and parser.

A response is a status line, header fields and an optional body, all
contained in one UDP datagram.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import ResponseParseError
from .headers import HeaderMap
from .request import ENCODING, Request

_PROTO_RE = re.compile(r"^HTTP/(\d{1,3})\.(\d{1,3})$")


@dataclass
class Response:
    """An HTTP response decoded from a single datagram."""
    status_code: int
    reason: str = ""
    proto: str = "HTTP/1.1"
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""
    request: Optional[Request] = None
    remote_addr: Optional[tuple[str, int]] = None

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".rstrip()

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Convert response to dictionary for serialization."""
        return {
            "remote_addr": (
                f"{self.remote_addr[0]}:{self.remote_addr[1]}" if self.remote_addr else None
            ),
            "proto": self.proto,
            "status_code": self.status_code,
            "reason": self.reason,
            "headers": self.headers.to_dict(),
            "body": self.body.decode("utf-8", errors="replace"),
        }


def parse_response(
    data: bytes,
    request: Optional[Request] = None,
    remote_addr: Optional[tuple[str, int]] = None,
) -> Response:
    """Parse a datagram payload as an HTTP response.

    Args:
        data: Raw datagram payload.
        request: Request the response answers. Kept for reference only,
            no method or URI matching is done.
        remote_addr: Sender address of the datagram.

    Returns:
        Parsed Response.

    Raises:
        ResponseParseError: If the status line or headers are malformed, or
            the header block is not terminated by a blank line.
    """
    lines, body = _split_head(data)
    if not lines:
        raise ResponseParseError("httpu: malformed HTTP response: missing status line")

    proto, status_code, reason = _parse_status_line(lines[0])
    headers = _parse_headers(lines[1:])

    content_length = headers.get("Content-Length")
    if content_length is not None:
        try:
            length = int(content_length.strip())
        except ValueError:
            length = -1
        if length < 0:
            raise ResponseParseError(f"httpu: bad Content-Length {content_length!r}")
        body = body[:length]

    return Response(
        status_code=status_code,
        reason=reason,
        proto=proto,
        headers=headers,
        body=body,
        request=request,
        remote_addr=remote_addr,
    )


def _split_head(data: bytes) -> tuple[list[str], bytes]:
    """Split the header block into lines, up to the first empty line."""
    lines: list[str] = []
    pos = 0
    while True:
        end = data.find(b"\n", pos)
        if end < 0:
            raise ResponseParseError("httpu: unexpected end of response headers")
        line = data[pos:end]
        if line.endswith(b"\r"):
            line = line[:-1]
        pos = end + 1
        if not line:
            return lines, data[pos:]
        lines.append(line.decode(ENCODING))


def _parse_status_line(line: str) -> tuple[str, int, str]:
    proto, _, rest = line.partition(" ")
    if not rest:
        raise ResponseParseError(f"httpu: malformed HTTP response {line!r}")
    if not _PROTO_RE.match(proto):
        raise ResponseParseError(f"httpu: malformed HTTP version {proto!r}")

    code, _, reason = rest.lstrip(" ").partition(" ")
    if len(code) != 3 or not code.isdigit():
        raise ResponseParseError(f"httpu: malformed HTTP status code {code!r}")
    return proto, int(code), reason.strip()


def _parse_headers(lines: list[str]) -> HeaderMap:
    fields: list[list[str]] = []
    for line in lines:
        if line[:1] in (" ", "\t"):
            # obs-fold: continuation of the previous field value
            if not fields:
                raise ResponseParseError(
                    f"httpu: malformed MIME header initial line {line!r}"
                )
            fields[-1][1] = f"{fields[-1][1]} {line.strip()}"
            continue

        name, sep, value = line.partition(":")
        if not sep or not name or name != name.strip() or " " in name:
            raise ResponseParseError(f"httpu: malformed MIME header line {line!r}")
        fields.append([name, value.strip()])

    headers = HeaderMap()
    for name, value in fields:
        headers.add(name, value)
    return headers
