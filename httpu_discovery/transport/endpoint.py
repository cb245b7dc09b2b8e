"""UDP endpoint with an absolute read deadline.

Wraps one IPv4 datagram socket bound to an ephemeral port. Reads honour a
deadline on the monotonic clock; once it has passed every read raises
``socket.timeout`` straight away, even if datagrams are queued.
"""

import errno
import socket
import struct
import sys
import time
from typing import Optional

from .interfaces import NetworkInterface

# Error numbers worth retrying on a read.
TEMPORARY_ERRNOS = frozenset(
    getattr(errno, name)
    for name in (
        "EAGAIN",
        "EWOULDBLOCK",
        "EINTR",
        "EMFILE",
        "ENFILE",
        "ECONNRESET",
        "ECONNABORTED",
        "ETIMEDOUT",
        "ENOBUFS",
    )
    if hasattr(errno, name)
)


# Raised instead of a truncated payload where recvfrom does not cut
# oversized datagrams silently (Windows).
TRUNCATION_ERRNOS = frozenset(
    getattr(errno, name)
    for name in ("EMSGSIZE", "WSAEMSGSIZE")
    if hasattr(errno, name)
)


def is_temporary_error(exc: OSError) -> bool:
    """Whether a socket error is transient and the read can be retried."""
    return exc.errno in TEMPORARY_ERRNOS


def is_truncated_datagram(exc: OSError) -> bool:
    """Whether a read failed only because the datagram exceeded the buffer."""
    return exc.errno in TRUNCATION_ERRNOS


class UdpEndpoint:
    """A single UDP socket used for both sending and receiving."""

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._deadline: Optional[float] = None
        self._closed = False

    @classmethod
    def listen(cls, host: str = "0.0.0.0", port: int = 0) -> "UdpEndpoint":
        """Create and bind the UDP socket.

        Args:
            host: Local address to bind. Default: all interfaces.
            port: Local port. Default: 0 (ephemeral).

        Raises:
            OSError: If the socket cannot be created or bound.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.bind((host, port))
        except OSError:
            sock.close()
            raise
        return cls(sock)

    @property
    def local_address(self) -> tuple[str, int]:
        return self._sock.getsockname()[:2]

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def set_deadline(self, deadline: Optional[float]) -> None:
        """Set the absolute read deadline (``time.monotonic()`` based).

        None removes the deadline and reads block until data arrives.
        """
        self._deadline = deadline

    def set_multicast_interface(self, interface: NetworkInterface) -> None:
        """Send subsequent multicast datagrams out of the given interface.

        Raises:
            OSError: If the interface cannot be selected.
        """
        if interface.ipv4:
            value = socket.inet_aton(interface.ipv4)
        elif interface.index and sys.platform.startswith("linux"):
            # struct ip_mreqn: multiaddr, address, ifindex
            value = struct.pack("=4s4si", b"\x00" * 4, b"\x00" * 4, interface.index)
        else:
            raise OSError(
                errno.EADDRNOTAVAIL,
                f"interface {interface.name} has no IPv4 address",
            )
        self._sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, value)

    def write_to(self, data: bytes, address: tuple[str, int]) -> int:
        """Send one datagram and return the number of bytes written."""
        self._sock.settimeout(None)
        return self._sock.sendto(data, address)

    def read_from(self, bufsize: int) -> tuple[bytes, tuple[str, int]]:
        """Receive one datagram, truncated to bufsize bytes.

        Raises:
            socket.timeout: If the deadline has been reached.
            OSError: On any other transport error.
        """
        if self._deadline is None:
            self._sock.settimeout(None)
        else:
            remaining = self._deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout("i/o deadline reached")
            self._sock.settimeout(remaining)
        data, address = self._sock.recvfrom(bufsize)
        return data, address[:2]

    def close(self) -> None:
        """Close the UDP socket."""
        if self._closed:
            return
        self._closed = True
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
