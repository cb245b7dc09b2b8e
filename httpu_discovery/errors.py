"""Exceptions raised by the HTTPU client."""


class HTTPUError(Exception):
    """Base class for all HTTPU errors."""


class EncodeError(HTTPUError):
    """The request could not be serialized."""


class AddressResolutionError(HTTPUError):
    """The destination host:port could not be resolved."""


class InterfaceEnumerationError(HTTPUError):
    """Local network interfaces could not be listed."""


class SendError(HTTPUError):
    """A request datagram could not be sent."""


class ShortWriteError(SendError):
    """The transport accepted fewer bytes than the full datagram."""

    def __init__(self, written: int, expected: int):
        self.written = written
        self.expected = expected
        super().__init__(
            f"httpu: wrote {written} bytes rather than full {expected} in request"
        )


class ReceiveError(HTTPUError):
    """Reading from the endpoint failed with a non-recoverable error."""


class ResponseParseError(HTTPUError):
    """A datagram is not a valid HTTP response.

    Never escapes an exchange: the client logs it and keeps collecting.
    """


class ClientClosedError(HTTPUError):
    """The client was used after close()."""
