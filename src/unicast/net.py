from __future__ import annotations

import socket
from typing import Tuple

from .constants import RECV_BUFSIZE, RECV_POLL_INTERVAL_S
from .errors import TransportError


class UdpEndpoint:
    def __init__(self, sock: socket.socket):
        self.sock = sock
        self._closed = False

    @classmethod
    def bound(
        cls,
        host: str,
        port: int,
        poll_interval_s: float = RECV_POLL_INTERVAL_S,
    ) -> "UdpEndpoint":
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            raise TransportError(f"failed to bind UDP socket to {host or '*'}:{port}: {exc}") from exc
        if poll_interval_s > 0:
            sock.settimeout(poll_interval_s)
        return cls(sock)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def local_address(self) -> Tuple[str, int]:
        return self.sock.getsockname()

    def sendto(self, data: bytes, addr: Tuple[str, int]) -> None:
        self.sock.sendto(data, addr)

    def recvfrom(self, bufsize: int = RECV_BUFSIZE) -> Tuple[bytes, Tuple[str, int]]:
        return self.sock.recvfrom(bufsize)

    def close(self) -> None:
        self._closed = True
        self.sock.close()
