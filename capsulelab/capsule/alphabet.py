from __future__ import annotations

import string
import unicodedata
from functools import lru_cache
from typing import Dict, List, Sequence

# 64 ASCII symbols first, then printable code points from U+0100 for larger bases.
_ASCII_POOL = string.digits + string.ascii_uppercase + string.ascii_lowercase + "+/"
_EXTENDED_START = 0x0100
_EXTENDED_STOP = 0xD800  # surrogates are not usable characters


@lru_cache(maxsize=16)
def default_alphabet(base: int) -> str:
    """Deterministic printable alphabet of exactly ``base`` distinct characters."""
    if base < 2:
        raise ValueError(f"base must be >= 2, got {base}")
    if base <= len(_ASCII_POOL):
        return _ASCII_POOL[:base]
    extra = base - len(_ASCII_POOL)
    chars: List[str] = []
    for cp in range(_EXTENDED_START, _EXTENDED_STOP):
        ch = chr(cp)
        # Combining marks would fuse with their neighbour when rendered
        if ch.isprintable() and not unicodedata.combining(ch):
            chars.append(ch)
            if len(chars) == extra:
                return _ASCII_POOL + "".join(chars)
    raise ValueError(f"no default alphabet for base {base}; configure one explicitly")


@lru_cache(maxsize=16)
def _reverse_lookup(alphabet: str) -> Dict[str, int]:
    return {ch: i for i, ch in enumerate(alphabet)}


def digits_to_string(digits: Sequence[int], alphabet: str) -> str:
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    base = len(alphabet)
    chars: List[str] = []
    for i, d in enumerate(digits):
        if d < 0 or d >= base:
            raise ValueError(f"digit {d} at position {i} out of range for alphabet of size {base}")
        chars.append(alphabet[d])
    return "".join(chars)


def string_to_digits(text: str, alphabet: str) -> List[int]:
    lookup = _reverse_lookup(alphabet)
    out: List[int] = []
    for i, ch in enumerate(text):
        idx = lookup.get(ch)
        if idx is None:
            raise ValueError(f"character {ch!r} at position {i} not in alphabet")
        out.append(idx)
    return out
