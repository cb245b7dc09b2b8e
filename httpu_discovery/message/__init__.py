"""Message module - HTTPU request encoding and response parsing."""

from .headers import HeaderMap
from .request import ENCODING, Request, encode_request
from .response import Response, parse_response

__all__ = [
    "ENCODING",
    "HeaderMap",
    "Request",
    "Response",
    "encode_request",
    "parse_response",
]
