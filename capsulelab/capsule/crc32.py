"""Table-driven reflected CRC-32 (IEEE 802.3, polynomial 0xEDB88320).

Output matches ``zlib.crc32``; ``value`` chains a previous checksum the same way.
"""
from __future__ import annotations

from typing import List

POLYNOMIAL = 0xEDB88320
MASK32 = 0xFFFFFFFF


def _build_table() -> List[int]:
    table: List[int] = []
    for i in range(256):
        c = i
        for _ in range(8):
            c = (POLYNOMIAL ^ (c >> 1)) if c & 1 else (c >> 1)
        table.append(c)
    return table


CRC_TABLE = _build_table()


def crc32(data: bytes, value: int = 0) -> int:
    """Return the CRC-32 of ``data`` as an unsigned 32-bit int."""
    c = (value ^ MASK32) & MASK32
    for b in data:
        c = CRC_TABLE[(c ^ b) & 0xFF] ^ (c >> 8)
    return c ^ MASK32
