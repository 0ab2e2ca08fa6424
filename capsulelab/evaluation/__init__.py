"""Deterministic evaluation harnesses for the capsule codec.

Roundtrip verification over every public path, avalanche-style diffusion of
the keyed permutation, and CRC-gate noise detection on energies.
"""

from .roundtrip import RoundtripResult, RoundtripFailure, run_roundtrip_tests
from .diffusion import DiffusionResult, compute_diffusion
from .noise import NoiseDetectionResult, compute_noise_detection
from .report import EvaluationReport

__all__ = [
    "RoundtripResult",
    "RoundtripFailure",
    "run_roundtrip_tests",
    "DiffusionResult",
    "compute_diffusion",
    "NoiseDetectionResult",
    "compute_noise_detection",
    "EvaluationReport",
]
