"""Resolution of ``host:port`` destination strings."""

import socket

from ..errors import AddressResolutionError


def split_host_port(hostport: str) -> tuple[str, str]:
    """Split ``host:port`` or ``[host]:port`` into host and port.

    Raises:
        AddressResolutionError: If the port is missing or the string has
            too many colons for an unbracketed host.
    """
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise AddressResolutionError(f"httpu: missing ']' in address {hostport!r}")
        host, rest = hostport[1:end], hostport[end + 1:]
        if not rest.startswith(":"):
            raise AddressResolutionError(f"httpu: missing port in address {hostport!r}")
        return host, rest[1:]

    host, sep, port = hostport.rpartition(":")
    if not sep:
        raise AddressResolutionError(f"httpu: missing port in address {hostport!r}")
    if ":" in host:
        raise AddressResolutionError(f"httpu: too many colons in address {hostport!r}")
    return host, port


def resolve_udp_address(hostport: str) -> tuple[str, int]:
    """Resolve a ``host:port`` string to an IPv4 (address, port) pair.

    An empty host resolves to the loopback address. The port may be numeric
    or a service name.

    Raises:
        AddressResolutionError: If the string is malformed or the host
            cannot be resolved.
    """
    host, port = split_host_port(hostport)
    if not port:
        raise AddressResolutionError(f"httpu: missing port in address {hostport!r}")
    if port.isdigit() and int(port) > 65535:
        raise AddressResolutionError(f"httpu: invalid port {port!r}")

    try:
        infos = socket.getaddrinfo(host or None, port, socket.AF_INET, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise AddressResolutionError(f"httpu: cannot resolve {hostport!r}: {e}") from e
    if not infos:
        raise AddressResolutionError(f"httpu: no address found for {hostport!r}")

    address, resolved_port = infos[0][4][:2]
    return address, resolved_port
