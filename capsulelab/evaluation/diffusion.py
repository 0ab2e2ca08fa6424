"""Diffusion of the keyed permutation, measured avalanche-style.

For each trial a random payload bit is flipped and both payloads are encoded.
The fraction of permuted-region bits that differ should sit near 0.5 once the
Feistel network has enough rounds.
"""
from __future__ import annotations

import random
import statistics
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional

from capsulelab.capsule.block import HEADER_SIZE
from capsulelab.capsule.codec import encode_capsule
from capsulelab.config import CapsuleConfig


def _hamming_distance_bytes(a: bytes, b: bytes) -> int:
    if len(a) != len(b):
        raise ValueError("hamming distance length mismatch")
    dist = 0
    for x, y in zip(a, b):
        dist += (x ^ y).bit_count()
    return dist


def _flip_bit(data: bytes, bit_index: int) -> bytes:
    byte_i = bit_index // 8
    bit_i = bit_index % 8
    if byte_i < 0 or byte_i >= len(data):
        raise IndexError("bit_index out of range")
    out = bytearray(data)
    out[byte_i] ^= 1 << bit_i
    return bytes(out)


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


@dataclass
class DiffusionResult:
    block_size: int
    rounds: int
    num_trials: int
    num_region_bits: int

    per_trial_fraction: List[float] = field(default_factory=list)

    mean: float = 0.0
    std: float = 0.0
    min_fraction: float = 0.0
    max_fraction: float = 0.0

    @property
    def passes(self) -> bool:
        """Heuristic: mean within 0.5 +/- 0.05 and no trial below 0.35."""
        return abs(self.mean - 0.5) < 0.05 and self.min_fraction > 0.35

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["passes"] = self.passes
        return d

    def summary(self) -> str:
        status = "PASS" if self.passes else "FAIL"
        return (
            f"[{status}] diffusion (rounds={self.rounds}): "
            f"mean={self.mean:.4f}, std={self.std:.4f}, "
            f"min={self.min_fraction:.4f}, max={self.max_fraction:.4f}"
        )


def compute_diffusion(
    config: CapsuleConfig,
    *,
    trials: int = 200,
    seed: int = 1337,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> DiffusionResult:
    """Flip one random payload bit per trial and measure region bit changes.

    Args:
        config: Capsule parameters (block size, key, rounds).
        trials: Number of random (payload, bit) pairs.
        seed: Random seed for reproducibility.
        progress_callback: Optional callback(current_trial, total_trials).
    """
    rng = random.Random(seed)
    region_bits = config.region_size * 8
    fractions: List[float] = []

    for t in range(trials):
        if progress_callback:
            progress_callback(t, trials)

        payload = _rand_bytes(rng, rng.randint(1, config.max_input_bytes))
        flipped = _flip_bit(payload, rng.randrange(0, len(payload) * 8))

        a = encode_capsule(payload, config).data[HEADER_SIZE:]
        b = encode_capsule(flipped, config).data[HEADER_SIZE:]
        fractions.append(_hamming_distance_bytes(a, b) / region_bits)

    mean = statistics.mean(fractions) if fractions else 0.0
    std = statistics.stdev(fractions) if len(fractions) > 1 else 0.0

    return DiffusionResult(
        block_size=config.block_size,
        rounds=config.feistel_rounds,
        num_trials=trials,
        num_region_bits=region_bits,
        per_trial_fraction=fractions,
        mean=round(mean, 6),
        std=round(std, 6),
        min_fraction=round(min(fractions), 6) if fractions else 0.0,
        max_fraction=round(max(fractions), 6) if fractions else 0.0,
    )
