"""How reliably the CRC-32 gate catches perturbed energies.

Each trial nudges one energy of a freshly encoded payload by +/- ``magnitude``
(kept inside [1, B] so the perturbation is real) and classifies what
``recover_capsule`` does with it.
"""
from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

from capsulelab.capsule.energy import make_energies, recover_capsule
from capsulelab.capsule.errors import CapsuleError
from capsulelab.config import CapsuleConfig


@dataclass
class NoiseDetectionResult:
    base: int
    block_size: int
    magnitude: int
    num_trials: int
    detected: int = 0         # recover_capsule raised a CapsuleError
    benign: int = 0           # payload still recovered intact (e.g. reserved flags byte hit)
    silent: int = 0           # different bytes returned without an error
    error_kinds: Dict[str, int] = field(default_factory=dict)
    silent_positions: List[int] = field(default_factory=list)

    @property
    def detection_rate(self) -> float:
        harmful = self.detected + self.silent
        return self.detected / harmful if harmful else 1.0

    @property
    def passes(self) -> bool:
        return self.silent == 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["detection_rate"] = self.detection_rate
        d["passes"] = self.passes
        return d

    def summary(self) -> str:
        status = "PASS" if self.passes else "FAIL"
        kinds = ", ".join(f"{k}={v}" for k, v in sorted(self.error_kinds.items())) or "none"
        return (
            f"[{status}] noise +/-{self.magnitude}: detected={self.detected}, "
            f"benign={self.benign}, silent={self.silent} ({kinds})"
        )


def _perturb(value: int, magnitude: int, base: int, rng: random.Random) -> int:
    up, down = value + magnitude, value - magnitude
    candidates = [v for v in (up, down) if 1 <= v <= base]
    if not candidates:
        # Magnitude exceeds the range; move to the opposite end instead
        return base if value != base else 1
    return rng.choice(candidates)


def compute_noise_detection(
    config: CapsuleConfig,
    *,
    trials: int = 200,
    seed: int = 1337,
    magnitude: int = 1,
) -> NoiseDetectionResult:
    if magnitude < 1:
        raise ValueError(f"magnitude must be >= 1, got {magnitude}")
    rng = random.Random(seed)
    kinds: Counter = Counter()
    result = NoiseDetectionResult(
        base=config.base,
        block_size=config.block_size,
        magnitude=magnitude,
        num_trials=trials,
    )

    for _ in range(trials):
        payload = bytes(rng.randrange(0, 256) for _ in range(rng.randint(0, config.max_input_bytes)))
        batch, _ = make_energies(payload, config)
        energies = batch.energies.copy()
        pos = rng.randrange(0, len(energies))
        energies[pos] = _perturb(int(energies[pos]), magnitude, config.base, rng)

        try:
            recovered = recover_capsule(energies, config)
        except CapsuleError as exc:
            result.detected += 1
            kinds[type(exc).__name__] += 1
            continue

        if recovered == payload:
            result.benign += 1
        else:
            result.silent += 1
            result.silent_positions.append(pos)

    result.error_kinds = dict(kinds)
    return result
