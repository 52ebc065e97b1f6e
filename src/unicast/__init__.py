"""Unicast transport over UDP.

Numbered service access points exchange short text messages through a
minimal unreliable transport:
- an address table mapping node ids to (host, port)
- a text PDU codec (``UPDREQPDU <len> <payload>``)
- a protocol object owning one UDP socket and a receive thread that hands
  payloads to an upper-layer callback
"""

from .addressing import AddressTable, Endpoint
from .errors import (
    AddressResolutionError,
    ConfigError,
    FramingError,
    FramingFault,
    TransportError,
    UnicastError,
)
from .protocol import ProtocolState, UnicastProtocol
from .service import ServiceUser, UnicastService, UnicastServiceUser, Worker

__all__ = [
    "AddressResolutionError",
    "AddressTable",
    "ConfigError",
    "Endpoint",
    "FramingError",
    "FramingFault",
    "ProtocolState",
    "ServiceUser",
    "TransportError",
    "UnicastError",
    "UnicastProtocol",
    "UnicastService",
    "UnicastServiceUser",
    "Worker",
]
