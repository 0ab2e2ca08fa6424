"""Digit <-> energy mapping at the boundary to the routing subsystem.

Digits live in [0, B-1]; energies are shifted to [1, B] and may be normalized
to E / (B + 1), which lies strictly inside (0, 1). Both directions clamp
instead of failing so that numeric noise from the energy domain reaches the
CRC-32 gate in ``recover_capsule`` rather than crashing earlier.
"""
from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from capsulelab.config import CapsuleConfig

from .block import CapsuleBlock
from .codec import block_to_digits, decode_capsule, digits_to_block, encode_capsule

logger = logging.getLogger(__name__)


def _check_base(base: int) -> None:
    if base < 2:
        raise ValueError(f"base must be >= 2, got {base}")


def _clamp(values: Sequence[float], lo: int, hi: int, what: str) -> np.ndarray:
    """Round floats, then clamp into [lo, hi] before the int64 cast so any magnitude saturates."""
    a = np.asarray(values)
    if a.dtype.kind == "f":
        if not np.all(np.isfinite(a)):
            raise ValueError(f"{what} must be finite")
        a = np.clip(np.rint(a), lo, hi)
    elif a.dtype.kind in "iu":
        a = np.clip(a, lo, hi)
    elif a.dtype.kind == "b":
        a = np.clip(a.astype(np.int64), lo, hi)
    elif a.dtype.kind == "O" and all(isinstance(v, numbers.Integral) for v in a.flat):
        # Python ints wider than int64
        a = np.array([min(max(int(v), lo), hi) for v in a.flat], dtype=np.int64).reshape(a.shape)
    else:
        raise ValueError(f"{what} must be numeric, got dtype {a.dtype}")
    return a.astype(np.int64)


def to_energies(digits: Sequence[int], base: int) -> np.ndarray:
    """digits in [0, B-1] -> energies in [1, B]."""
    _check_base(base)
    return _clamp(digits, 0, base - 1, "digits") + 1


def to_digits(energies: Sequence[float], base: int) -> np.ndarray:
    """energies in [1, B] -> digits in [0, B-1].

    Float energies are rounded to the nearest integer before clamping.
    """
    _check_base(base)
    return _clamp(energies, 1, base, "energies") - 1


def normalize(energies: Sequence[int], base: int) -> np.ndarray:
    """E / (B + 1), in the open interval (0, 1) for energies in [1, B]."""
    _check_base(base)
    return np.asarray(energies, dtype=np.float64) / float(base + 1)


@dataclass(frozen=True)
class EnergiesBatch:
    digits_count: int
    energies: np.ndarray                 # int64, values in [1, B]
    normalized: Optional[np.ndarray]     # float64 in (0, 1), None when normalization == "none"

    def to_dict(self) -> dict:
        return {
            "digits_count": self.digits_count,
            "energies": self.energies.tolist(),
            "normalized": None if self.normalized is None else self.normalized.tolist(),
        }


def make_energies(data: bytes, config: CapsuleConfig) -> Tuple[EnergiesBatch, CapsuleBlock]:
    """Encode ``data`` and express the whole block as energies."""
    block = encode_capsule(data, config)
    digits = block_to_digits(block, config)
    energies = to_energies(digits, config.base)
    normalized = normalize(energies, config.base) if config.normalization == "e_over_bplus1" else None
    logger.debug(
        "capsule.to_energies count=%d base=%d normalization=%s",
        len(energies), config.base, config.normalization,
    )
    return EnergiesBatch(digits_count=len(digits), energies=energies, normalized=normalized), block


def recover_capsule(energies: Sequence[float], config: CapsuleConfig) -> bytes:
    """Energies -> digits -> block -> payload, gated by the CRC-32 check."""
    digits = to_digits(energies, config.base)
    logger.debug("capsule.from_energies count=%d base=%d", len(digits), config.base)
    block = digits_to_block(digits.tolist(), config)
    return decode_capsule(block, config)
