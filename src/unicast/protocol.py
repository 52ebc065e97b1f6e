from __future__ import annotations

import enum
import logging
import threading
from pathlib import Path
from typing import Optional, Tuple

from .addressing import AddressTable
from .constants import RECV_POLL_INTERVAL_S
from .errors import AddressResolutionError, ConfigError, FramingError, TransportError
from .net import UdpEndpoint
from .pdu import decode, encode
from .service import UnicastServiceUser

logger = logging.getLogger(__name__)


class ProtocolState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    RUNNING = "running"
    CLOSING = "closing"
    CLOSED = "closed"


class UnicastProtocol:
    """Unicast transport over a single UDP socket.

    Maps node ids to endpoints through an AddressTable, frames payloads as
    PDUs and hands inbound payloads to ``upper.on_data_indication`` from a
    background receive thread.

    ``send`` runs on the caller's thread and may be called concurrently from
    several threads. ``close`` clears the running flag and releases the
    socket without waiting for the receive thread; it is idempotent.
    """

    def __init__(
        self,
        table: AddressTable,
        self_id: int,
        upper: Optional[UnicastServiceUser],
        *,
        bind_host: str = "",
        poll_interval_s: float = RECV_POLL_INTERVAL_S,
    ):
        self._state = ProtocolState.UNINITIALIZED
        self._table = table
        self._self_id = self_id
        self._upper = upper
        self._lock = threading.Lock()
        self._running = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.receive_error: Optional[OSError] = None

        self._state = ProtocolState.INITIALIZING
        try:
            me = table.lookup(self_id)
        except AddressResolutionError:
            raise ConfigError(f"self node not found in config: {self_id}") from None

        self._udp = UdpEndpoint.bound(bind_host, me.port, poll_interval_s)

        self._running.set()
        self._state = ProtocolState.RUNNING
        self._thread = threading.Thread(
            target=self._receive_loop,
            name=f"UP-Receiver-{self_id}",
            daemon=True,
        )
        self._thread.start()
        logger.info("node %d listening on UDP port %d (%d peers in table)", self_id, me.port, len(table))

    @classmethod
    def from_config(
        cls,
        path: str | Path,
        self_id: int,
        upper: Optional[UnicastServiceUser],
        **kwargs,
    ) -> "UnicastProtocol":
        return cls(AddressTable.from_path(path), self_id, upper, **kwargs)

    @classmethod
    def from_resource(
        cls,
        name: str,
        self_id: int,
        upper: Optional[UnicastServiceUser],
        **kwargs,
    ) -> "UnicastProtocol":
        return cls(AddressTable.from_resource(name), self_id, upper, **kwargs)

    @property
    def self_id(self) -> int:
        return self._self_id

    @property
    def table(self) -> AddressTable:
        return self._table

    @property
    def state(self) -> ProtocolState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._udp.closed

    @property
    def local_address(self) -> Tuple[str, int]:
        return self._udp.local_address

    def send(self, dest_id: int, payload: str) -> None:
        endpoint = self._table.lookup(dest_id)
        pdu = encode(payload)

        if not self._running.is_set():
            raise TransportError("protocol is closed")
        try:
            self._udp.sendto(pdu, endpoint.sockaddr)
        except OSError as exc:
            raise TransportError(f"failed to send UDP packet to {endpoint}: {exc}") from exc
        logger.debug("sent %d bytes to node %d (%s)", len(pdu), dest_id, endpoint)

    def close(self) -> None:
        with self._lock:
            if self._state in (ProtocolState.CLOSING, ProtocolState.CLOSED):
                return
            self._state = ProtocolState.CLOSING

        self._running.clear()
        self._udp.close()
        self._state = ProtocolState.CLOSED
        logger.info("node %d closed", self._self_id)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the receive thread to exit. Returns True once it has."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __enter__(self) -> "UnicastProtocol":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _receive_loop(self) -> None:
        while self._running.is_set():
            try:
                raw, addr = self._udp.recvfrom()
            except TimeoutError:
                continue
            except OSError as exc:
                if not self._running.is_set():
                    break
                self.receive_error = exc
                logger.error("node %d: receive failed, receiver stopping: %s", self._self_id, exc)
                break

            if not self._running.is_set():
                break
            self._deliver(raw, addr)

        logger.debug("node %d: receiver exited", self._self_id)

    def _deliver(self, raw: bytes, addr: Tuple[str, int]) -> None:
        try:
            payload = decode(raw)
            origin = self._table.resolve_origin(addr)
        except (FramingError, AddressResolutionError) as exc:
            logger.warning("node %d: dropping datagram from %s:%d: %s", self._self_id, addr[0], addr[1], exc)
            return

        logger.debug("node %d: %d bytes from node %d", self._self_id, len(raw), origin)
        if self._upper is None:
            return
        try:
            self._upper.on_data_indication(origin, payload)
        except Exception:
            logger.exception("node %d: upper layer failed on indication from node %d", self._self_id, origin)
