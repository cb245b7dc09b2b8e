"""HTTPU discovery client.

Sends HTTP-formatted requests over UDP (unicast or multicast) and collects
whatever responses arrive before a deadline.
"""

from .discovery import HTTPUClient
from .errors import (
    AddressResolutionError,
    ClientClosedError,
    EncodeError,
    HTTPUError,
    InterfaceEnumerationError,
    ReceiveError,
    ResponseParseError,
    SendError,
    ShortWriteError,
)
from .message import HeaderMap, Request, Response, encode_request, parse_response

__version__ = "0.1.0"

__all__ = [
    "HTTPUClient",
    "HeaderMap",
    "Request",
    "Response",
    "encode_request",
    "parse_response",
    "HTTPUError",
    "EncodeError",
    "AddressResolutionError",
    "InterfaceEnumerationError",
    "SendError",
    "ShortWriteError",
    "ReceiveError",
    "ResponseParseError",
    "ClientClosedError",
]
