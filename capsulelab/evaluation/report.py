"""Structured evaluation report builder.

Aggregates roundtrip, diffusion and noise-detection results into a single
serializable report for export and CLI display.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .diffusion import DiffusionResult
from .noise import NoiseDetectionResult
from .roundtrip import RoundtripResult


@dataclass
class EvaluationReport:
    timestamp: str = ""
    config: Optional[Dict[str, Any]] = None
    roundtrip_results: List[RoundtripResult] = field(default_factory=list)
    diffusion_results: List[DiffusionResult] = field(default_factory=list)
    noise_results: List[NoiseDetectionResult] = field(default_factory=list)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    @property
    def all_pass(self) -> bool:
        return (
            all(r.is_perfect for r in self.roundtrip_results)
            and all(d.passes for d in self.diffusion_results)
            and all(n.passes for n in self.noise_results)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "config": self.config,
            "roundtrip": [r.to_dict() for r in self.roundtrip_results],
            "diffusion": [d.to_dict() for d in self.diffusion_results],
            "noise": [n.to_dict() for n in self.noise_results],
            "summary": {
                "roundtrip_all_pass": all(r.is_perfect for r in self.roundtrip_results),
                "diffusion_all_pass": all(d.passes for d in self.diffusion_results),
                "noise_all_pass": all(n.passes for n in self.noise_results),
                "all_pass": self.all_pass,
            },
        }

    def to_summary(self) -> str:
        """Human-readable summary for terminal output."""
        lines = [f"Capsule Evaluation Report - {self.timestamp}", "=" * 50]

        if self.roundtrip_results:
            rt_pass = sum(1 for r in self.roundtrip_results if r.is_perfect)
            lines.append(f"\nRoundtrip: {rt_pass}/{len(self.roundtrip_results)} paths pass")
            for r in self.roundtrip_results:
                lines.append(f"  {r.summary()}")

        if self.diffusion_results:
            lines.append("\nDiffusion:")
            for d in self.diffusion_results:
                lines.append(f"  {d.summary()}")

        if self.noise_results:
            lines.append("\nNoise detection:")
            for n in self.noise_results:
                lines.append(f"  {n.summary()}")

        return "\n".join(lines)
