"""Capsule header and block value types.

Binary layout of a block (all integers little-endian)::

    offset 0      length   u16   payload byte count
    offset 2      flags    u8    reserved, 0
    offset 3      crc32    u32   CRC-32 of the unpermuted payload
    offset 7      payload  (length bytes)
    offset 7+len  zero padding up to block_size
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from .errors import InvalidBlockSize, InvalidBlockStructure, MalformedHeader

HEADER_SIZE = 7
_HEADER = struct.Struct("<HBI")


@dataclass(frozen=True)
class CapsuleHeader:
    length: int
    crc32: int
    flags: int = 0

    def __post_init__(self):
        if not 0 <= self.length <= 0xFFFF:
            raise InvalidBlockStructure(f"header length {self.length} does not fit in u16")
        if not 0 <= self.flags <= 0xFF:
            raise InvalidBlockStructure(f"header flags {self.flags} do not fit in u8")
        if not 0 <= self.crc32 <= 0xFFFFFFFF:
            raise InvalidBlockStructure(f"header crc32 {self.crc32} does not fit in u32")

    def encode(self) -> bytes:
        return _HEADER.pack(self.length, self.flags, self.crc32)

    @classmethod
    def decode(cls, data: bytes) -> "CapsuleHeader":
        if len(data) < HEADER_SIZE:
            raise MalformedHeader(f"need {HEADER_SIZE} header bytes, got {len(data)}")
        length, flags, crc = _HEADER.unpack_from(data, 0)
        return cls(length=length, crc32=crc, flags=flags)


@dataclass(frozen=True)
class CapsuleBlock:
    """Exactly ``block_size`` bytes: header || payload || padding.

    Construction with any other length is an error; the type never pads or truncates.
    """
    data: bytes
    block_size: int

    def __post_init__(self):
        object.__setattr__(self, "data", bytes(self.data))
        if len(self.data) != self.block_size:
            raise InvalidBlockSize(expected=self.block_size, actual=len(self.data))

    def __len__(self) -> int:
        return self.block_size

    def header(self) -> CapsuleHeader:
        return CapsuleHeader.decode(self.data[:HEADER_SIZE])

    def payload(self) -> bytes:
        """Header-declared payload slice (only meaningful on an unpermuted block)."""
        length = self.header().length
        end = HEADER_SIZE + length
        if end > len(self.data):
            raise MalformedHeader(
                f"payload length {length} runs past block of {len(self.data)} bytes"
            )
        return self.data[HEADER_SIZE:end]

    def hex(self) -> str:
        return self.data.hex()

    @classmethod
    def fromhex(cls, text: str, block_size: int) -> "CapsuleBlock":
        return cls(data=bytes.fromhex(text.strip()), block_size=block_size)
