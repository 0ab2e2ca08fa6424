"""Keyed pseudorandom permutation over the capsule payload region.

A balanced Feistel network whose round function is an HMAC-SHA-256 stream
expander. It exists to diffuse small plaintext changes across the block and
to be exactly invertible with the same key and round count. It is a mixer,
not an audited cipher: a wrong key or round count simply yields garbage,
which the checksum gate rejects later.
"""
from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

DEFAULT_FEISTEL_KEY = b"default-feistel-key"

# (data, key, round_index) -> pseudorandom bytes (at least one)
RoundFunction = Callable[[bytes, bytes, int], bytes]


def parse_key_hex(key_hex: str) -> Optional[bytes]:
    """Raw key bytes for ``key_hex``, or None when it is empty or not valid hex."""
    try:
        key = bytes.fromhex(key_hex.strip())
    except ValueError:
        return None
    return key or None


def derive_key(key_hex: str, *, allow_default: bool = False) -> bytes:
    """Parse ``key_hex`` into raw key bytes.

    Malformed or empty hex raises ``ValueError`` unless ``allow_default`` is set,
    in which case the fixed :data:`DEFAULT_FEISTEL_KEY` is returned instead.
    """
    key = parse_key_hex(key_hex)
    if key is not None:
        return key
    if allow_default:
        return DEFAULT_FEISTEL_KEY
    raise ValueError(f"key_hex is not a non-empty hex string: {key_hex!r}")


def prf_hmac_sha256(data: bytes, key: bytes, round_index: int) -> bytes:
    """Expand HMAC-SHA-256(data || round || counter) to ``max(1, len(data))`` bytes.

    ``round_index`` and ``counter`` are 4-byte big-endian.
    """
    target_len = max(1, len(data))
    r_b = int(round_index).to_bytes(4, "big", signed=False)
    buf = b""
    ctr = 0
    while len(buf) < target_len:
        buf += hmac.new(key, data + r_b + ctr.to_bytes(4, "big", signed=False), hashlib.sha256).digest()
        ctr += 1
    return buf[:target_len]


def xor_cycle(a: bytes, pad: bytes) -> bytes:
    """XOR ``a`` with ``pad`` repeated as needed; result has ``len(a)`` bytes."""
    if not a:
        return a
    n = len(pad)
    return bytes(x ^ pad[i % n] for i, x in enumerate(a))


def _split(region: bytes, rounds: int, *, inverse: bool) -> Tuple[bytes, bytes]:
    # Forward: R takes the extra byte of an odd region. Each round swaps the
    # half lengths, so after an odd round count the boundary sits at n - n//2.
    mid = len(region) // 2
    if inverse and rounds % 2 == 1:
        mid = len(region) - mid
    return region[:mid], region[mid:]


def feistel_forward(region: bytes, key: bytes, rounds: int, prf: RoundFunction = prf_hmac_sha256) -> bytes:
    if rounds < 1:
        raise ValueError(f"rounds must be >= 1, got {rounds}")
    if not region:
        return region
    L, R = _split(region, rounds, inverse=False)
    for r in range(rounds):
        F = prf(R, key, r)
        L, R = R, xor_cycle(L, F)
    return L + R


def feistel_inverse(region: bytes, key: bytes, rounds: int, prf: RoundFunction = prf_hmac_sha256) -> bytes:
    if rounds < 1:
        raise ValueError(f"rounds must be >= 1, got {rounds}")
    if not region:
        return region
    L, R = _split(region, rounds, inverse=True)
    for r in reversed(range(rounds)):
        # Reverse of: L,R = R, L XOR F(R)
        # so: prev_R = L
        #     prev_L = R XOR F(prev_R)
        prev_R = L
        prev_L = xor_cycle(R, prf(prev_R, key, r))
        L, R = prev_L, prev_R
    return L + R


@dataclass(frozen=True)
class FeistelPermutation:
    """Feistel network bound to one key, round count and round function."""
    key: bytes
    rounds: int
    prf: RoundFunction = prf_hmac_sha256

    def apply(self, region: bytes) -> bytes:
        return feistel_forward(region, self.key, self.rounds, self.prf)

    def invert(self, region: bytes) -> bytes:
        return feistel_inverse(region, self.key, self.rounds, self.prf)

    def apply_after(self, block: bytes, offset: int) -> bytes:
        """Permute everything after ``offset``; the prefix passes through untouched."""
        return block[:offset] + self.apply(block[offset:])

    def invert_after(self, block: bytes, offset: int) -> bytes:
        return block[:offset] + self.invert(block[offset:])
