from __future__ import annotations

from .constants import MAX_PDU_SIZE, PDU_TAG
from .errors import FramingError, FramingFault

_PREFIX = PDU_TAG + " "


def encode(payload: str) -> bytes:
    """Frame ``payload`` as ``UPDREQPDU <len> <payload>``.

    ``len`` is the UTF-8 byte length of the payload. Raises FramingError
    (OVERSIZED) when the whole PDU would exceed MAX_PDU_SIZE bytes.
    """
    if not isinstance(payload, str):
        raise TypeError(f"payload must be str, not {type(payload).__name__}")

    body = payload.encode("utf-8")
    header = f"{_PREFIX}{len(body)} ".encode("ascii")
    total = len(header) + len(body)
    if total > MAX_PDU_SIZE:
        raise FramingError(
            FramingFault.OVERSIZED,
            f"header={len(header)}, payload={len(body)}, total={total} > {MAX_PDU_SIZE}",
        )
    return header + body


def decode(raw: bytes) -> str:
    """Extract the payload from a received PDU."""
    text = raw.decode("utf-8", errors="replace")
    if not text.startswith(_PREFIX):
        raise FramingError(FramingFault.BAD_HEADER, f"expected {PDU_TAG!r} tag")

    sep = text.find(" ", len(_PREFIX))
    if sep < 0:
        raise FramingError(FramingFault.MISSING_LENGTH)

    field = text[len(_PREFIX) : sep]
    if not (field.isascii() and field.isdigit()):
        raise FramingError(FramingFault.BAD_LENGTH, repr(field))
    declared = int(field)

    payload = text[sep + 1 :]
    actual = len(payload.encode("utf-8"))
    if actual != declared:
        raise FramingError(FramingFault.LENGTH_MISMATCH, f"declared {declared}, got {actual}")
    return payload
