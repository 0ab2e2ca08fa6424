"""Error taxonomy for capsule framing and decoding.

Every error carries the values needed to diagnose it (expected vs. actual
where that applies). None of them are retried or swallowed inside the codec.
"""
from __future__ import annotations


class CapsuleError(ValueError):
    """Base class for all capsule codec failures."""


class InputTooLong(CapsuleError):
    def __init__(self, max_bytes: int, actual: int):
        self.max_bytes = max_bytes
        self.actual = actual
        super().__init__(f"Input length {actual} exceeds max_input_bytes={max_bytes}")


class MalformedHeader(CapsuleError):
    def __init__(self, reason: str = "Malformed capsule header"):
        self.reason = reason
        super().__init__(reason)


class CrcMismatch(CapsuleError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"CRC mismatch: expected=0x{expected:08X} actual=0x{actual:08X}")


class InvalidBlockSize(CapsuleError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid block size: expected={expected} actual={actual}")


class InvalidBlockStructure(CapsuleError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid block structure: {reason}")
