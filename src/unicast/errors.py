from __future__ import annotations

import enum


class UnicastError(Exception):
    pass


class ConfigError(UnicastError):
    def __init__(self, reason: str, line: int | None = None):
        self.reason = reason
        self.line = line
        if line is None:
            super().__init__(reason)
        else:
            super().__init__(f"line {line}: {reason}")


class AddressResolutionError(UnicastError):
    pass


class FramingFault(enum.Enum):
    OVERSIZED = "oversized"
    BAD_HEADER = "bad header"
    MISSING_LENGTH = "missing length"
    BAD_LENGTH = "bad length"
    LENGTH_MISMATCH = "length mismatch"


class FramingError(UnicastError):
    def __init__(self, fault: FramingFault, detail: str = ""):
        self.fault = fault
        self.detail = detail
        super().__init__(f"{fault.value}: {detail}" if detail else fault.value)


class TransportError(UnicastError):
    pass
