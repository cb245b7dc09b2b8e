"""Transport module - UDP endpoint, address resolution and interfaces."""

from .address import resolve_udp_address, split_host_port
from .endpoint import UdpEndpoint, is_temporary_error, is_truncated_datagram
from .interfaces import NetworkInterface, list_interfaces

__all__ = [
    "NetworkInterface",
    "UdpEndpoint",
    "is_temporary_error",
    "is_truncated_datagram",
    "list_interfaces",
    "resolve_udp_address",
    "split_host_port",
]
