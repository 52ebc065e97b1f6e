from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Tuple

from .constants import (
    LOCALHOST,
    LOCALHOST_ADDRESS,
    NODE_ID_MAX,
    NODE_ID_MIN,
    PORT_MAX,
    PORT_MIN,
)
from .errors import AddressResolutionError, ConfigError

logger = logging.getLogger(__name__)


def is_valid_node_id(node_id: int) -> bool:
    return NODE_ID_MIN <= node_id <= NODE_ID_MAX


def is_valid_host(host: str) -> bool:
    if host == LOCALHOST:
        return True
    parts = host.split(".")
    if len(parts) != 4:
        return False
    return all(p.isascii() and p.isdigit() and int(p) <= 255 for p in parts)


def is_valid_port(port: int) -> bool:
    return PORT_MIN < port <= PORT_MAX


@dataclass(frozen=True, slots=True)
class Endpoint:
    host: str
    port: int

    @property
    def address(self) -> str:
        if self.host == LOCALHOST:
            return LOCALHOST_ADDRESS
        return ".".join(str(int(p)) for p in self.host.split("."))

    @property
    def sockaddr(self) -> Tuple[str, int]:
        return self.address, self.port

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_int(text: str) -> int:
    """Parse a plain decimal integer: optional sign, ASCII digits only."""
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"not a decimal integer: {text!r}")
    return int(text)


def _parse_line(line: str, lineno: int) -> Tuple[int, Endpoint]:
    fields = line.split()
    if len(fields) != 3:
        raise ConfigError(f"expected '<id> <host> <port>', got {len(fields)} fields: {line!r}", lineno)

    raw_id, host, raw_port = fields
    try:
        node_id = parse_int(raw_id)
        port = parse_int(raw_port)
    except ValueError:
        raise ConfigError(f"invalid number in {line!r}", lineno) from None

    if not is_valid_node_id(node_id):
        raise ConfigError(f"invalid node id: {node_id}", lineno)
    if not is_valid_host(host):
        raise ConfigError(f"invalid host: {host}", lineno)
    if not is_valid_port(port):
        raise ConfigError(f"invalid port: {port}", lineno)
    return node_id, Endpoint(host, port)


class AddressTable(Mapping):
    """Read-only mapping of node id -> Endpoint.

    Built once from ``<id> <host> <port>`` lines. Blank lines and ``#``
    comments are skipped; any other malformed line aborts construction.
    A repeated id silently replaces the earlier entry.
    """

    def __init__(self, entries: Mapping[int, Endpoint]):
        self._entries: Mapping[int, Endpoint] = MappingProxyType(dict(entries))

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "AddressTable":
        entries: Dict[int, Endpoint] = {}
        for lineno, line in enumerate(lines, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            node_id, endpoint = _parse_line(line, lineno)
            if node_id in entries:
                logger.debug("line %d: node %d redefined (%s -> %s)", lineno, node_id, entries[node_id], endpoint)
            entries[node_id] = endpoint
        return cls(entries)

    @classmethod
    def from_text(cls, text: str) -> "AddressTable":
        return cls.from_lines(text.splitlines())

    @classmethod
    def from_path(cls, path: str | Path) -> "AddressTable":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"source not found: {path} ({exc})") from exc
        return cls.from_text(text)

    @classmethod
    def from_resource(cls, name: str, package: str = "unicast") -> "AddressTable":
        try:
            text = resources.files(package).joinpath(name).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"source not found: {package}/{name} ({exc})") from exc
        return cls.from_text(text)

    def __getitem__(self, node_id: int) -> Endpoint:
        return self._entries[node_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AddressTable({dict(self._entries)!r})"

    def lookup(self, node_id: int) -> Endpoint:
        try:
            return self._entries[node_id]
        except KeyError:
            raise AddressResolutionError(f"destination address not found: {node_id}") from None

    def resolve_origin(self, addr: Tuple[str, int]) -> int:
        sip, sport = addr[0], addr[1]
        for node_id, endpoint in self._entries.items():
            if endpoint.port == sport and endpoint.address == sip:
                return node_id
        raise AddressResolutionError(f"unknown source: {sip}:{sport}")
