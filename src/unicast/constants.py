from __future__ import annotations

PDU_TAG = "UPDREQPDU"
MAX_PDU_SIZE = 1024

NODE_ID_MIN = 0
NODE_ID_MAX = 32767  # int16

PORT_MIN = 1024  # exclusive
PORT_MAX = 65535

LOCALHOST = "localhost"
LOCALHOST_ADDRESS = "127.0.0.1"

RECV_BUFSIZE = 65535
RECV_POLL_INTERVAL_S = 0.2

DEFAULT_CONFIG_RESOURCE = "up.conf"
