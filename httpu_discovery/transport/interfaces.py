"""Enumeration of local network interfaces and their multicast capability."""

import socket
from dataclasses import dataclass, field
from typing import Any, Optional

import psutil

from ..errors import InterfaceEnumerationError


@dataclass(frozen=True)
class NetworkInterface:
    """A local network interface as reported by the OS."""
    name: str
    index: int = 0
    flags: frozenset = field(default_factory=frozenset)
    ipv4: Optional[str] = None
    is_up: bool = True

    @property
    def supports_multicast(self) -> bool:
        return "multicast" in self.flags

    @property
    def is_loopback(self) -> bool:
        return "loopback" in self.flags

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "index": self.index,
            "ipv4": self.ipv4,
            "up": self.is_up,
            "multicast": self.supports_multicast,
            "flags": sorted(self.flags),
        }


def list_interfaces() -> list[NetworkInterface]:
    """List local interfaces, ordered by OS interface index.

    Returns:
        One NetworkInterface per interface psutil reports.

    Raises:
        InterfaceEnumerationError: If the OS query fails.
    """
    try:
        stats = psutil.net_if_stats()
        addrs = psutil.net_if_addrs()
    except (OSError, psutil.Error) as e:
        raise InterfaceEnumerationError(f"httpu: cannot list interfaces: {e}") from e

    interfaces = []
    for name, st in stats.items():
        ipv4 = next(
            (a.address for a in addrs.get(name, []) if a.family == socket.AF_INET),
            None,
        )
        flags = _parse_flags(getattr(st, "flags", ""))
        if not flags:
            flags = _infer_flags(st.isup, ipv4)
        interfaces.append(NetworkInterface(
            name=name,
            index=_interface_index(name),
            flags=flags,
            ipv4=ipv4,
            is_up=bool(st.isup),
        ))

    interfaces.sort(key=lambda i: (i.index, i.name))
    return interfaces


def _parse_flags(raw: str) -> frozenset:
    return frozenset(f.strip().lower() for f in raw.split(",") if f.strip())


def _infer_flags(isup: bool, ipv4: Optional[str]) -> frozenset:
    """Approximate flags on platforms where psutil reports none (Windows)."""
    flags = set()
    if isup:
        flags.add("up")
    if ipv4 and ipv4.startswith("127."):
        flags.add("loopback")
    elif isup and ipv4:
        flags.add("multicast")
    return frozenset(flags)


def _interface_index(name: str) -> int:
    try:
        return socket.if_nametoindex(name)
    except OSError:
        return 0
