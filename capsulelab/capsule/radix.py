"""Lossless conversion between base-256 byte strings and fixed-length base-B digit vectors.

Numbers are plain digit lists. Every public function takes and returns them
most-significant-digit first; only the long-division loop accumulates
least-significant-first internally and reverses before returning.
"""
from __future__ import annotations

import math
from functools import lru_cache
from typing import List, Sequence


def _check_base(base: int) -> None:
    if base < 2:
        raise ValueError(f"base must be >= 2, got {base}")


@lru_cache(maxsize=64)
def required_digits_count(byte_count: int, base: int) -> int:
    """Digits needed to hold any ``byte_count``-byte value: ceil(n * ln 256 / ln base).

    The float estimate is settled with exact integer comparisons, so the result
    is the smallest D with base**D >= 256**n.
    """
    _check_base(base)
    if byte_count <= 0:
        return 1
    limit = 1 << (8 * byte_count)
    estimate = max(1, math.ceil(byte_count * math.log(256) / math.log(base)))
    while estimate > 1 and base ** (estimate - 1) >= limit:
        estimate -= 1
    while base ** estimate < limit:
        estimate += 1
    return estimate


def _drop_leading_zeros(digits: Sequence[int]) -> List[int]:
    i = 0
    while i < len(digits) and digits[i] == 0:
        i += 1
    return list(digits[i:])


def convert_base(digits: Sequence[int], from_base: int, to_base: int) -> List[int]:
    """Repeated long division of an MSD-first numeral; returns MSD-first, ``[0]`` for zero."""
    src = _drop_leading_zeros(digits)
    if not src:
        return [0]
    out: List[int] = []
    while src:
        quotient: List[int] = []
        rem = 0
        for d in src:
            acc = rem * from_base + d
            q, rem = divmod(acc, to_base)
            if quotient or q:
                quotient.append(q)
        out.append(rem)  # LSD
        src = quotient
    out.reverse()
    return out


def bytes_to_digits(data: bytes, base: int) -> List[int]:
    """Big-endian bytes -> base-``base`` digits, zero-padded to ``required_digits_count``."""
    _check_base(base)
    n_digits = required_digits_count(len(data), base)
    converted = convert_base(list(data), 256, base)
    if len(converted) >= n_digits:
        return converted[-n_digits:]
    return [0] * (n_digits - len(converted)) + converted


def digits_to_bytes(digits: Sequence[int], base: int, byte_count: int) -> bytes:
    """Inverse of :func:`bytes_to_digits`; result is exactly ``byte_count`` bytes.

    A digit vector wider than ``byte_count`` bytes keeps only its low-order bytes.
    """
    _check_base(base)
    values = [int(d) for d in digits]
    for i, d in enumerate(values):
        if d < 0 or d >= base:
            raise ValueError(f"digit {d} at position {i} out of range for base {base}")
    converted = convert_base(values, base, 256)
    if byte_count <= 0:
        return b""
    if len(converted) >= byte_count:
        return bytes(converted[-byte_count:])
    return bytes(byte_count - len(converted)) + bytes(converted)
