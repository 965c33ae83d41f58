"""Batch verification of every cipher engine.

Usage:
    python scripts/run_roundtrip.py                         # all engines, roundtrip only
    python scripts/run_roundtrip.py --ciphers des idea      # subset
    python scripts/run_roundtrip.py --sac --sac-trials 50   # add avalanche analysis

Writes report.json and summary.txt into a fresh run directory and exits
non-zero if any engine fails a roundtrip vector.

Research / education only. Do NOT use in production.
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

from cipherscope.cipher.registry import CipherRegistry
from cipherscope.config import load_settings
from cipherscope.evaluation.avalanche import compute_sac
from cipherscope.evaluation.report import EvaluationReport
from cipherscope.evaluation.roundtrip import run_roundtrip_tests
from cipherscope.utils.repro import make_run_dir, set_global_seed, write_json, write_text

logger = logging.getLogger("run_roundtrip")


def _cli_progress(message: str, current: int, total: int) -> None:
    """Print progress to stderr."""
    pct = (current / total * 100) if total > 0 else 0
    print(f"  [{current + 1}/{total}] ({pct:.0f}%) {message}", file=sys.stderr)


def main(argv=None) -> int:
    settings = load_settings()
    registry = CipherRegistry()

    parser = argparse.ArgumentParser(description="Roundtrip (and optional SAC) verification of all engines")
    parser.add_argument("--ciphers", nargs="+", default=None, type=str.lower,
                        help=f"Engines to verify (default: {' '.join(registry.list())})")
    parser.add_argument("--vectors", type=int, default=settings.roundtrip_vectors,
                        help="Random vectors per engine")
    parser.add_argument("--seed", type=int, default=settings.global_seed)
    parser.add_argument("--sac", action="store_true", help="Also run SAC on the block engines")
    parser.add_argument("--sac-trials", type=int, default=50)
    parser.add_argument("--output-dir", default=settings.runs_dir)
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    set_global_seed(args.seed)

    names = args.ciphers or registry.list()
    unknown = [n for n in names if not registry.exists(n)]
    if unknown:
        parser.error(f"unknown cipher(s): {', '.join(unknown)}")

    report = EvaluationReport()
    for idx, name in enumerate(names):
        _cli_progress(f"roundtrip {name}", idx, len(names))
        result = run_roundtrip_tests(name, num_vectors=args.vectors, seed=args.seed, registry=registry)
        logger.info(result.summary())
        report.roundtrip_results.append(result)

    if args.sac:
        block_names = [n for n in names if registry.get(n).spec.kind == "block"]
        for idx, name in enumerate(block_names):
            _cli_progress(f"SAC {name}", idx, len(block_names))
            for input_type in ("plaintext", "key"):
                sac = compute_sac(name, input_type=input_type, trials=args.sac_trials,
                                  seed=args.seed, registry=registry)
                logger.info(sac.summary())
                report.sac_results.append(sac)

    paths = make_run_dir(args.output_dir, "roundtrip")
    write_json(paths.report_json, report.to_dict())
    write_text(paths.summary_txt, report.to_summary())

    print(report.to_summary())
    print(f"\nReport written to {paths.run_dir}")

    failing = report.failing_algorithms()
    if failing:
        logger.error("Roundtrip failures: %s", ", ".join(failing))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
