from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Protocol, Tuple

from .addressing import Endpoint, is_valid_host, is_valid_node_id, is_valid_port

logger = logging.getLogger(__name__)


class UnicastServiceUser(Protocol):
    """Upper layer of a UnicastProtocol.

    ``on_data_indication`` is called on the protocol's receive thread, one
    indication at a time. A slow implementation holds up reception.
    """

    def on_data_indication(self, origin_id: int, payload: str) -> None: ...


class UnicastService(Protocol):
    def send(self, dest_id: int, payload: str) -> None: ...


IndicationHandler = Callable[[int, str], None]


class ServiceUser:
    """Pass-through upper layer with late binding to its transport.

    Create it first, hand it to the UnicastProtocol, then ``bind`` the
    protocol back into it.
    """

    def __init__(
        self,
        self_id: int,
        transport: Optional[UnicastService] = None,
        handler: Optional[IndicationHandler] = None,
    ):
        self.self_id = self_id
        self._transport = transport
        self._handler = handler

    @property
    def bound(self) -> bool:
        return self._transport is not None

    def bind(self, transport: UnicastService) -> None:
        self._transport = transport

    def send(self, dest_id: int, payload: str) -> None:
        if self._transport is None:
            raise RuntimeError(f"service user {self.self_id} not bound to a transport yet")
        self._transport.send(dest_id, payload)

    def on_data_indication(self, origin_id: int, payload: str) -> None:
        if self._handler is not None:
            self._handler(origin_id, payload)
        else:
            logger.info("node %d received from %d: %s", self.self_id, origin_id, payload)


class Worker:
    """A named service access point (node, manager, ...) on top of a transport.

    The role only labels log output; id, host and port are validated once
    here, and checked against the transport's own table entry on ``bind``.
    """

    def __init__(self, role: str, node_id: int, host: str, port: int):
        if not is_valid_node_id(node_id):
            raise ValueError(f"invalid {role} id: {node_id}")
        if not is_valid_host(host):
            raise ValueError(f"invalid host: {host}")
        if not is_valid_port(port):
            raise ValueError(f"invalid port: {port}")

        self.role = role
        self.node_id = node_id
        self.host = host
        self.port = port
        self.received: List[Tuple[int, str]] = []
        self._user = ServiceUser(node_id, handler=self._on_indication)
        self._stop = threading.Event()

    def __repr__(self) -> str:
        return f"Worker({self.role!r}, {self.node_id}, {self.host!r}, {self.port})"

    @property
    def user(self) -> ServiceUser:
        return self._user

    def bind(self, transport: UnicastService) -> None:
        table = getattr(transport, "table", None)
        if table is not None:
            self_id = getattr(transport, "self_id", self.node_id)
            if self_id != self.node_id:
                raise ValueError(f"{self.role} {self.node_id} cannot bind to transport of node {self_id}")
            listening = table.lookup(self_id)
            if listening.sockaddr != Endpoint(self.host, self.port).sockaddr:
                raise ValueError(
                    f"{self.role} {self.node_id} is configured as {self.host}:{self.port}"
                    f" but its transport is at {listening}"
                )
        self._user.bind(transport)

    def send(self, dest_id: int, payload: str) -> None:
        self._user.send(dest_id, payload)

    def _on_indication(self, origin_id: int, payload: str) -> None:
        self.received.append((origin_id, payload))
        logger.info("%s %d received data from %d: %s", self.role, self.node_id, origin_id, payload)

    def run(self, timeout: Optional[float] = None) -> bool:
        """Block until ``stop`` is called. Returns False on timeout."""
        logger.info("running %s %d on %s:%d", self.role, self.node_id, self.host, self.port)
        stopped = self._stop.wait(timeout)
        if stopped:
            logger.info("%s %d has stopped", self.role, self.node_id)
        return stopped

    def stop(self) -> None:
        self._stop.set()
