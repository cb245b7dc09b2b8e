"""HTTPU exchange engine.

One exchange encodes a request, resolves the destination, sends the request
out of every multicast-capable interface ``num_sends`` times, then collects
responses on the same socket until the deadline passes:

1. Encode request
2. Resolve destination
3. Set the read deadline (covers sending and collection)
4. Enumerate interfaces
5. Send rounds
6. Collect responses

Only failures to send reach the caller. Read timeouts end the collection
normally, temporary read errors are retried and malformed datagrams are
logged and dropped.
"""

import logging
import socket
import threading
import time
from typing import Callable, Optional

from ..errors import (
    ClientClosedError,
    ReceiveError,
    ResponseParseError,
    SendError,
    ShortWriteError,
)
from ..message.request import Request, encode_request
from ..message.response import Response, parse_response
from ..transport.address import resolve_udp_address
from ..transport.endpoint import UdpEndpoint, is_temporary_error, is_truncated_datagram
from ..transport.interfaces import NetworkInterface, list_interfaces
from .deadline import Deadline
from .policy import ExchangePolicy, default_exchange_policy

log = logging.getLogger(__name__)


class HTTPUClient:
    """Client for HTTP over UDP, typically HTTPMU/SSDP discovery.

    Owns one UDP socket. Exchanges are serialized by a lock, so only one
    exchange is in flight per client; a concurrent caller blocks until the
    current one finishes.
    """

    def __init__(
        self,
        endpoint: Optional[UdpEndpoint] = None,
        *,
        logger: Optional[logging.Logger] = None,
        interfaces: Callable[[], list[NetworkInterface]] = list_interfaces,
        policy: Optional[ExchangePolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        bind_addr: str = "0.0.0.0",
    ):
        """Initialize the client.

        Args:
            endpoint: UDP endpoint to use. Default: a new socket bound to
                ``bind_addr`` on an ephemeral port.
            logger: Sink for non-fatal diagnostics such as unparseable
                responses. Default: this module's logger.
            interfaces: Returns the local interfaces; called once per exchange.
            policy: Send pacing and read buffer size.
            sleep: Sleep function used between rounds and after
                temporary read errors.
            bind_addr: Local address to bind when no endpoint is given.

        Raises:
            OSError: If the socket cannot be created.
        """
        self._lock = threading.Lock()
        self._endpoint = endpoint if endpoint is not None else UdpEndpoint.listen(bind_addr)
        self._log = logger or log
        self._list_interfaces = interfaces
        self.policy = policy or default_exchange_policy()
        self._sleep = sleep

    @classmethod
    def open(cls, **kwargs) -> "HTTPUClient":
        """Open a client with a fresh UDP socket."""
        return cls(**kwargs)

    @property
    def closed(self) -> bool:
        return self._endpoint.closed

    @property
    def local_address(self) -> tuple[str, int]:
        return self._endpoint.local_address

    def close(self) -> None:
        """Shut down the client. It is no longer usable afterwards."""
        with self._lock:
            self._endpoint.close()

    def exchange(
        self,
        request: Request,
        timeout: float,
        num_sends: int = 1,
    ) -> list[Response]:
        """Send a request and collect the responses that arrive before the deadline.

        The deadline is set once, before sending, so time spent sending
        shortens the collection window.

        Args:
            request: Request to send.
            timeout: Seconds from the start of sending until collection stops.
            num_sends: Number of send rounds across all multicast interfaces.

        Returns:
            Successfully parsed responses in arrival order. Empty if nothing
            arrived; duplicates from repeated sends are kept.

        Raises:
            ValueError: If num_sends is less than 1.
            ClientClosedError: If the client was closed.
            EncodeError: If the request cannot be encoded.
            AddressResolutionError: If request.host cannot be resolved.
            InterfaceEnumerationError: If interfaces cannot be listed.
            SendError: If a datagram cannot be sent in full.
            ReceiveError: If reading fails with a non-temporary error.
        """
        if num_sends < 1:
            raise ValueError(f"num_sends must be at least 1, got {num_sends}")

        with self._lock:
            if self._endpoint.closed:
                raise ClientClosedError("httpu: client is closed")

            payload = encode_request(request)
            destination = resolve_udp_address(request.host)

            deadline = Deadline(timeout)
            self._endpoint.set_deadline(deadline.start())

            interfaces = self._list_interfaces()
            self._broadcast(payload, destination, interfaces, num_sends)
            responses = self._collect(request)

            self._log.debug(
                "httpu: %s collected %d response(s) in %.3fs",
                request.request_line, len(responses), deadline.elapsed,
            )
            return responses

    def _broadcast(
        self,
        payload: bytes,
        destination: tuple[str, int],
        interfaces: list[NetworkInterface],
        num_sends: int,
    ) -> None:
        multicast = [i for i in interfaces if i.supports_multicast]
        self._log.debug(
            "httpu: sending %d bytes to %s:%d, %d round(s) over %s",
            len(payload), destination[0], destination[1], num_sends,
            ", ".join(i.name for i in multicast) or "no multicast interfaces",
        )

        for _ in range(num_sends):
            for interface in multicast:
                try:
                    self._endpoint.set_multicast_interface(interface)
                    written = self._endpoint.write_to(payload, destination)
                except OSError as e:
                    raise SendError(
                        f"httpu: failed to send request via {interface.name}: {e}"
                    ) from e
                if written < len(payload):
                    raise ShortWriteError(written, len(payload))
            self._sleep(self.policy.send_interval)

    def _collect(self, request: Request) -> list[Response]:
        responses: list[Response] = []
        while True:
            try:
                data, remote_addr = self._endpoint.read_from(self.policy.read_buffer_size)
            except socket.timeout:
                break
            except OSError as e:
                if is_truncated_datagram(e):
                    self._log.warning(
                        "httpu: dropping response larger than %d bytes: %s",
                        self.policy.read_buffer_size, e,
                    )
                    continue
                if is_temporary_error(e):
                    # Pause before the next read.
                    self._sleep(self.policy.read_retry_delay)
                    continue
                raise ReceiveError(f"httpu: failed to read response: {e}") from e

            try:
                response = parse_response(data, request=request, remote_addr=remote_addr)
            except ResponseParseError as e:
                self._log.warning(
                    "httpu: error while parsing response from %s: %s", remote_addr, e
                )
                continue
            responses.append(response)
        return responses

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
