from __future__ import annotations

import queue
import socket
from typing import Tuple

import pytest

from unicast.addressing import AddressTable


def _free_port() -> int:
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
    finally:
        s.close()


class Collector:
    def __init__(self) -> None:
        self.inbox: "queue.Queue[Tuple[int, str]]" = queue.Queue()

    def on_data_indication(self, origin_id: int, payload: str) -> None:
        self.inbox.put((origin_id, payload))

    def next(self, timeout: float = 2.0) -> Tuple[int, str]:
        return self.inbox.get(timeout=timeout)


@pytest.fixture
def ports() -> Tuple[int, int, int]:
    return _free_port(), _free_port(), _free_port()


@pytest.fixture
def table(ports) -> AddressTable:
    a, b, c = ports
    return AddressTable.from_lines([f"0 localhost {a}", f"1 127.0.0.1 {b}", f"2 localhost {c}"])


@pytest.fixture
def collector() -> Collector:
    return Collector()
