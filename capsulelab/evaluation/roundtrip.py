"""Roundtrip verification: payload == decode(encode(payload)).

Generates randomized payloads of random length up to ``max_input_bytes`` and
pushes each through one of the pipeline's public paths, recording any vector
that does not come back byte-identical.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Literal, Optional

from capsulelab.capsule.codec import decode_capsule, decode_from_string, encode_capsule, encode_to_string
from capsulelab.capsule.energy import make_energies, recover_capsule
from capsulelab.config import CapsuleConfig

Via = Literal["block", "string", "energies"]


@dataclass
class RoundtripFailure:
    """Details of a single failed roundtrip vector."""
    vector_index: int
    payload_hex: str
    recovered_hex: str       # What the decoder returned (should equal payload)
    error: Optional[str]     # Exception message if encode/decode threw


@dataclass
class RoundtripResult:
    via: str
    block_size: int
    base: int
    rounds: int
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] roundtrip via {self.via} (block={self.block_size}, base={self.base}, "
            f"rounds={self.rounds}): {self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def _roundtrip_fn(via: Via, config: CapsuleConfig) -> Callable[[bytes], bytes]:
    if via == "block":
        return lambda data: decode_capsule(encode_capsule(data, config), config)
    if via == "string":
        return lambda data: decode_from_string(encode_to_string(data, config), config)
    if via == "energies":
        return lambda data: recover_capsule(make_energies(data, config)[0].energies, config)
    raise ValueError(f"via must be 'block', 'string' or 'energies', got '{via}'")


def run_roundtrip_tests(
    config: CapsuleConfig,
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    via: Via = "block",
    max_failures_recorded: int = 10,
) -> RoundtripResult:
    """Run ``num_vectors`` random payloads through the ``via`` path and back.

    Args:
        config: Capsule parameters to test.
        num_vectors: Number of random payloads.
        seed: Random seed for deterministic reproducibility.
        via: Which public path to exercise: raw block, printable string or energies.
        max_failures_recorded: Maximum number of failure details to keep.
    """
    roundtrip = _roundtrip_fn(via, config)
    rng = random.Random(seed)
    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()

    for i in range(num_vectors):
        payload = _rand_bytes(rng, rng.randint(0, config.max_input_bytes))
        try:
            recovered = roundtrip(payload)
            if recovered == payload:
                passed += 1
                continue
            failed += 1
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    payload_hex=payload.hex(),
                    recovered_hex=recovered.hex(),
                    error=None,
                ))
        except Exception as exc:
            failed += 1
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    payload_hex=payload.hex(),
                    recovered_hex="<error>",
                    error=f"{type(exc).__name__}: {exc}",
                ))

    elapsed = time.perf_counter() - start

    return RoundtripResult(
        via=via,
        block_size=config.block_size,
        base=config.base,
        rounds=config.feistel_rounds,
        total_vectors=num_vectors,
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )
