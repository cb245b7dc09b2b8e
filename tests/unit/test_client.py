import errno
import logging
import socket
import threading
import time

import pytest

from conftest import SSDP_RESPONSE, FakeEndpoint, make_interface
from httpu_discovery.discovery.client import HTTPUClient
from httpu_discovery.discovery.policy import ExchangePolicy
from httpu_discovery.errors import (
    AddressResolutionError,
    ClientClosedError,
    EncodeError,
    InterfaceEnumerationError,
    ReceiveError,
    SendError,
    ShortWriteError,
)
from httpu_discovery.message.request import Request, encode_request

pytestmark = pytest.mark.unit

OTHER_RESPONSE = SSDP_RESPONSE.replace(b"192.0.2.10", b"192.0.2.20")


def test_sends_once_per_multicast_interface_per_round(make_client, endpoint, msearch, sleeps):
    client = make_client(endpoint)
    client.exchange(msearch, timeout=0.1, num_sends=3)

    # lo has no multicast flag: 2 interfaces x 3 rounds
    assert len(endpoint.sent) == 6
    assert [name for name, _, _ in endpoint.sent] == ["eth0", "wlan0"] * 3
    payload = encode_request(msearch)
    assert all(data == payload for _, data, _ in endpoint.sent)
    assert all(addr == ("239.255.255.250", 1900) for _, _, addr in endpoint.sent)
    assert sleeps == [0.005] * 3


def test_scenario_msearch_two_sends_one_interface(make_client, endpoint, msearch):
    client = make_client(endpoint, interfaces=lambda: [make_interface("eth0", 2)])
    responses = client.exchange(msearch, timeout=0.1, num_sends=2)

    assert len(endpoint.sent) == 2
    assert all(data.startswith(b"M-SEARCH * HTTP/1.1\r\n") for _, data, _ in endpoint.sent)
    assert responses == []


def test_non_multicast_interfaces_get_no_sends(make_client, endpoint, msearch):
    only_unicast = [make_interface("lo", 1, multicast=False), make_interface("tun0", 5, multicast=False)]
    client = make_client(endpoint, interfaces=lambda: only_unicast)
    assert client.exchange(msearch, timeout=0.1, num_sends=4) == []
    assert endpoint.sent == []


def test_deadline_set_once_before_sending(make_client, msearch):
    endpoint = FakeEndpoint()
    before = time.monotonic()
    make_client(endpoint).exchange(msearch, timeout=2.0)
    assert len(endpoint.deadlines) == 1
    assert before + 2.0 <= endpoint.deadlines[0] <= time.monotonic() + 2.0


def test_no_responses_is_empty_result_not_error(make_client, endpoint, msearch):
    assert make_client(endpoint).exchange(msearch, timeout=0.05) == []


def test_responses_in_arrival_order_with_duplicates(make_client, msearch):
    endpoint = FakeEndpoint(incoming=[
        (OTHER_RESPONSE, ("192.0.2.20", 1900)),
        (SSDP_RESPONSE, ("192.0.2.10", 1900)),
        (OTHER_RESPONSE, ("192.0.2.20", 1900)),
    ])
    responses = make_client(endpoint).exchange(msearch, timeout=0.1, num_sends=2)

    assert [r.remote_addr[0] for r in responses] == ["192.0.2.20", "192.0.2.10", "192.0.2.20"]
    assert all(r.request is msearch for r in responses)


def test_malformed_datagram_skipped_and_logged(make_client, msearch, caplog):
    endpoint = FakeEndpoint(incoming=[SSDP_RESPONSE, b"garbage\r\n\r\n", OTHER_RESPONSE])
    with caplog.at_level(logging.WARNING, logger="httpu_discovery.discovery.client"):
        responses = make_client(endpoint).exchange(msearch, timeout=0.1)

    assert len(responses) == 2
    assert responses[1].header("LOCATION") == "http://192.0.2.20:49152/description.xml"
    assert "error while parsing response" in caplog.text


def test_parse_failures_go_to_injected_logger(make_client, msearch):
    records = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    sink = logging.getLogger("tests.httpu.sink")
    sink.addHandler(ListHandler())
    sink.propagate = False
    try:
        endpoint = FakeEndpoint(incoming=[b"not http"])
        assert make_client(endpoint, logger=sink).exchange(msearch, timeout=0.1) == []
    finally:
        sink.handlers.clear()
        sink.propagate = True

    assert [r.levelno for r in records if "parsing" in r.getMessage()] == [logging.WARNING]


def test_oversized_datagram_is_truncated_and_dropped(make_client, msearch, caplog):
    oversized = b"HTTP/1.1 200 OK\r\nX-Pad: " + b"a" * 3000 + b"\r\n\r\n"
    endpoint = FakeEndpoint(incoming=[oversized, SSDP_RESPONSE])
    with caplog.at_level(logging.WARNING):
        responses = make_client(endpoint).exchange(msearch, timeout=0.1)

    assert len(responses) == 1
    assert endpoint.reads == 3
    assert "unexpected end of response headers" in caplog.text


def test_message_too_long_read_drops_datagram_and_continues(make_client, msearch, caplog, sleeps):
    endpoint = FakeEndpoint(incoming=[
        SSDP_RESPONSE,
        OSError(errno.EMSGSIZE, "Message too long"),
        OTHER_RESPONSE,
    ])
    with caplog.at_level(logging.WARNING, logger="httpu_discovery.discovery.client"):
        responses = make_client(endpoint).exchange(msearch, timeout=0.1)

    assert [r.remote_addr for r in responses] == [("192.0.2.10", 1900)] * 2
    assert responses[1].header("LOCATION") == "http://192.0.2.20:49152/description.xml"
    assert "larger than 2048 bytes" in caplog.text
    # dropped without the temporary-error pause
    assert sleeps == [0.005]


def test_read_buffer_size_from_policy(make_client, msearch):
    endpoint = FakeEndpoint(incoming=[SSDP_RESPONSE])
    client = make_client(endpoint, policy=ExchangePolicy(read_buffer_size=16))
    assert client.exchange(msearch, timeout=0.1) == []


def test_temporary_read_error_retried_after_pause(make_client, msearch, sleeps):
    endpoint = FakeEndpoint(incoming=[
        OSError(errno.EAGAIN, "Resource temporarily unavailable"),
        ConnectionResetError(errno.ECONNRESET, "Connection reset by peer"),
        SSDP_RESPONSE,
    ])
    responses = make_client(endpoint).exchange(msearch, timeout=0.1, num_sends=1)

    assert len(responses) == 1
    assert sleeps == [0.005, 0.01, 0.01]


def test_fatal_read_error_discards_responses(make_client, msearch):
    endpoint = FakeEndpoint(incoming=[SSDP_RESPONSE, OSError(errno.EBADF, "Bad file descriptor")])
    with pytest.raises(ReceiveError) as exc_info:
        make_client(endpoint).exchange(msearch, timeout=0.1)
    assert exc_info.value.__cause__.errno == errno.EBADF


def test_unresolvable_host_fails_before_sending(make_client, endpoint):
    request = Request(method="M-SEARCH", target="*", host="not-a-host-port")
    with pytest.raises(AddressResolutionError):
        make_client(endpoint).exchange(request, timeout=0.1)
    assert endpoint.sent == []
    assert endpoint.deadlines == []


def test_encode_failure_fails_before_sending(make_client, endpoint):
    request = Request(method="GET", target="/", host="192.0.2.1:80", headers={"X": "☃"})
    with pytest.raises(EncodeError):
        make_client(endpoint).exchange(request, timeout=0.1)
    assert endpoint.sent == []


def test_interface_enumeration_failure_is_fatal(make_client, endpoint, msearch):
    def fail():
        raise InterfaceEnumerationError("httpu: cannot list interfaces")

    with pytest.raises(InterfaceEnumerationError):
        make_client(endpoint, interfaces=fail).exchange(msearch, timeout=0.1)
    assert endpoint.sent == []
    assert endpoint.reads == 0


def test_send_failure_aborts_without_collecting(make_client, msearch):
    endpoint = FakeEndpoint(
        incoming=[SSDP_RESPONSE],
        send_error=OSError(errno.ENETUNREACH, "Network is unreachable"),
    )
    with pytest.raises(SendError, match="eth0"):
        make_client(endpoint).exchange(msearch, timeout=0.1, num_sends=2)
    assert endpoint.reads == 0


def test_multicast_interface_failure_is_send_error(make_client, msearch):
    endpoint = FakeEndpoint(multicast_error=OSError(errno.EADDRNOTAVAIL, "no address"))
    with pytest.raises(SendError):
        make_client(endpoint).exchange(msearch, timeout=0.1)
    assert endpoint.sent == []


def test_short_write_is_fatal(make_client, msearch):
    endpoint = FakeEndpoint(written=5)
    with pytest.raises(ShortWriteError) as exc_info:
        make_client(endpoint).exchange(msearch, timeout=0.1, num_sends=3)
    assert exc_info.value.written == 5
    assert exc_info.value.expected == len(encode_request(msearch))
    assert len(endpoint.sent) == 1


def test_num_sends_must_be_positive(make_client, endpoint, msearch):
    with pytest.raises(ValueError):
        make_client(endpoint).exchange(msearch, timeout=0.1, num_sends=0)


def test_closed_client_rejects_exchange(make_client, endpoint, msearch):
    client = make_client(endpoint)
    with client:
        pass
    assert endpoint.closed
    assert client.closed
    with pytest.raises(ClientClosedError):
        client.exchange(msearch, timeout=0.1)


def test_interfaces_enumerated_every_exchange(make_client, endpoint, msearch, interfaces):
    calls = []

    def lister():
        calls.append(1)
        return interfaces

    client = make_client(endpoint, interfaces=lister)
    client.exchange(msearch, timeout=0.1)
    client.exchange(msearch, timeout=0.1)
    assert len(calls) == 2


def test_concurrent_exchanges_do_not_interleave(interfaces, msearch):
    active = []
    overlaps = []
    entered = threading.Event()
    release = threading.Event()

    class SlowEndpoint(FakeEndpoint):
        def write_to(self, data, address):
            active.append(1)
            if len(active) > 1:
                overlaps.append(1)
            entered.set()
            release.wait(2.0)
            active.pop()
            return super().write_to(data, address)

    endpoint = SlowEndpoint()
    client = HTTPUClient(
        endpoint,
        interfaces=lambda: [make_interface("eth0", 2)],
        sleep=lambda s: None,
    )

    first = threading.Thread(target=client.exchange, args=(msearch, 0.1))
    second = threading.Thread(target=client.exchange, args=(msearch, 0.1))
    first.start()
    assert entered.wait(2.0)
    second.start()
    time.sleep(0.05)
    # second exchange is blocked on the lock, not writing
    assert len(endpoint.sent) == 0
    release.set()
    first.join(2.0)
    second.join(2.0)

    assert overlaps == []
    assert len(endpoint.sent) == 2


def test_default_endpoint_is_bound_udp_socket():
    with HTTPUClient.open(bind_addr="127.0.0.1") as client:
        host, port = client.local_address
        assert host == "127.0.0.1"
        assert port > 0
    assert client.closed


def test_real_timeout_returns_empty():
    request = Request(method="M-SEARCH", target="*", host="127.0.0.1:9")
    with HTTPUClient.open(bind_addr="127.0.0.1", interfaces=lambda: []) as client:
        start = time.monotonic()
        assert client.exchange(request, timeout=0.1) == []
        assert time.monotonic() - start < 1.0


def test_socket_timeout_class_ends_collection(make_client, msearch):
    endpoint = FakeEndpoint(incoming=[SSDP_RESPONSE, socket.timeout("timed out"), SSDP_RESPONSE])
    assert len(make_client(endpoint).exchange(msearch, timeout=0.1)) == 1
