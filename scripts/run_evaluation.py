"""Run the capsule evaluation harnesses and save a report.

Usage:
    python scripts/run_evaluation.py                          # defaults from env / .env
    python scripts/run_evaluation.py --config configs/baseline.json --vectors 500
    python scripts/run_evaluation.py --trials 50 --no-save    # quick check
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from pydantic import ValidationError

from capsulelab.config import load_capsule_config, load_settings
from capsulelab.evaluation import (
    EvaluationReport,
    compute_diffusion,
    compute_noise_detection,
    run_roundtrip_tests,
)
from capsulelab.utils.logs import configure_logging
from capsulelab.utils.repro import make_run_dir, write_json, write_text

logger = logging.getLogger("capsulelab.evaluation.cli")


def main() -> int:
    parser = argparse.ArgumentParser(description="Capsule codec evaluation runner")
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON capsule config (default: environment / built-in defaults)",
    )
    parser.add_argument(
        "--vectors", type=int, default=200,
        help="Roundtrip vectors per path (default: 200)",
    )
    parser.add_argument(
        "--trials", type=int, default=200,
        help="Diffusion and noise trials (default: 200)",
    )
    parser.add_argument(
        "--magnitude", type=int, nargs="+", default=[1],
        help="Energy perturbation magnitudes for noise detection (default: 1)",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed (default: GLOBAL_SEED)",
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Runs directory (default: RUNS_DIR)",
    )
    parser.add_argument(
        "--no-save", action="store_true",
        help="Print the summary only; do not write a run directory",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    try:
        settings = load_settings()
        config = load_capsule_config(args.config) if args.config else settings.capsule
    except ValidationError as e:
        print(f"Invalid capsule configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(
        "DEBUG" if args.verbose else settings.log_level,
        settings.log_levels_override,
    )
    seed = args.seed if args.seed is not None else settings.global_seed

    report = EvaluationReport(config=config.model_dump())

    for via in ("block", "string", "energies"):
        logger.info("Roundtrip via %s (%d vectors)", via, args.vectors)
        report.roundtrip_results.append(
            run_roundtrip_tests(config, num_vectors=args.vectors, seed=seed, via=via)
        )

    logger.info("Diffusion (%d trials)", args.trials)
    report.diffusion_results.append(compute_diffusion(config, trials=args.trials, seed=seed))

    for magnitude in args.magnitude:
        logger.info("Noise detection magnitude=%d (%d trials)", magnitude, args.trials)
        report.noise_results.append(
            compute_noise_detection(config, trials=args.trials, seed=seed, magnitude=magnitude)
        )

    summary = report.to_summary()
    print(summary)

    if not args.no_save:
        paths = make_run_dir(args.output_dir or settings.runs_dir, "capsule_eval")
        write_json(paths.config_json, config.model_dump())
        write_json(paths.report_json, report.to_dict())
        write_text(paths.summary_txt, summary + "\n")
        print(f"\nAll results saved to: {paths.run_dir}")

    return 0 if report.all_pass else 2


if __name__ == "__main__":
    sys.exit(main())
