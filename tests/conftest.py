import socket

import pytest

from httpu_discovery.discovery.client import HTTPUClient
from httpu_discovery.message.request import Request
from httpu_discovery.transport.interfaces import NetworkInterface

SSDP_RESPONSE = (
    b"HTTP/1.1 200 OK\r\n"
    b"CACHE-CONTROL: max-age=1800\r\n"
    b"EXT:\r\n"
    b"LOCATION: http://192.0.2.10:49152/description.xml\r\n"
    b"SERVER: Linux/5.10 UPnP/1.0 test/1.0\r\n"
    b"ST: upnp:rootdevice\r\n"
    b"USN: uuid:11111111-2222-3333-4444-555555555555::upnp:rootdevice\r\n"
    b"\r\n"
)

REMOTE_ADDR = ("192.0.2.10", 1900)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without real sockets")
    config.addinivalue_line("markers", "system: tests exchanging datagrams over loopback")


class FakeEndpoint:
    """Records sends and replays scripted reads.

    ``incoming`` items are datagram payloads (bytes), ``(payload, addr)``
    tuples, or exception instances to raise from read_from. Once the script
    is exhausted every read times out, like a passed deadline.
    """

    def __init__(self, incoming=None, written=None, send_error=None, multicast_error=None):
        self.incoming = list(incoming or [])
        self.sent = []
        self.deadlines = []
        self.reads = 0
        self.closed = False
        self._written = written
        self._send_error = send_error
        self._multicast_error = multicast_error
        self._interface = None

    @property
    def local_address(self):
        return ("0.0.0.0", 40000)

    def set_deadline(self, deadline):
        self.deadlines.append(deadline)

    def set_multicast_interface(self, interface):
        if self._multicast_error is not None:
            raise self._multicast_error
        self._interface = interface

    def write_to(self, data, address):
        if self._send_error is not None:
            raise self._send_error
        self.sent.append((self._interface.name, data, address))
        return self._written if self._written is not None else len(data)

    def read_from(self, bufsize):
        self.reads += 1
        if not self.incoming:
            raise socket.timeout("i/o deadline reached")
        item = self.incoming.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, tuple):
            data, addr = item
        else:
            data, addr = item, REMOTE_ADDR
        return data[:bufsize], addr

    def close(self):
        self.closed = True


def make_interface(name, index, multicast=True, ipv4="192.0.2.1"):
    flags = {"up", "broadcast", "running"}
    if multicast:
        flags.add("multicast")
    return NetworkInterface(name=name, index=index, flags=frozenset(flags), ipv4=ipv4)


@pytest.fixture
def interfaces():
    return [
        make_interface("lo", 1, multicast=False, ipv4="127.0.0.1"),
        make_interface("eth0", 2, ipv4="192.0.2.1"),
        make_interface("wlan0", 3, ipv4="198.51.100.7"),
    ]


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def endpoint():
    return FakeEndpoint()


@pytest.fixture
def make_client(interfaces, sleeps):
    def _make(endpoint, **kwargs):
        kwargs.setdefault("interfaces", lambda: interfaces)
        kwargs.setdefault("sleep", sleeps.append)
        return HTTPUClient(endpoint, **kwargs)
    return _make


@pytest.fixture
def msearch():
    return Request(
        method="M-SEARCH",
        target="*",
        host="239.255.255.250:1900",
        headers={"MAN": ['"ssdp:discover"']},
    )
