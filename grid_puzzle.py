"""
Command-line driver for the grid solver.

Usage examples
--------------

Built-in preset:

    grid-puzzle --preset prime-parity-5x5

Custom configuration with a step budget and a JSON result file:

    grid-puzzle \
        --config puzzles/my_variant.json \
        --max-steps 500000 \
        --format rows \
        --output results/my_variant.json

The solution is printed as a comma-joined row-major list and/or as rows. The
exit status is 1 when no solution is found or the result fails validation.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from grid_constraints import PuzzleConfig, describe
from grid_solver import SearchResult, solve_puzzle
from grid_validator import check_grid
from puzzle_presets import PRESETS, get_preset, load_config


def format_flat(solution: Sequence[int]) -> str:
    return ",".join(str(value) for value in solution)


def format_rows(solution: Sequence[int], size: int) -> str:
    width = len(str(size * size))
    lines = []
    for r in range(size):
        row = solution[r * size:(r + 1) * size]
        lines.append(" ".join(str(value).rjust(width) for value in row))
    return "\n".join(lines)


def result_payload(config: PuzzleConfig, result: SearchResult, issues: List[str]) -> Dict[str, Any]:
    return {
        "puzzle": config.name,
        "size": config.size,
        "status": result.status,
        "message": result.message,
        "seeds": [list(seed) for seed in result.seeds],
        "solution": result.solution,
        "rows": result.rows(config.size),
        "valid": bool(result.solved and not issues),
        "issues": issues,
        "steps": result.steps,
        "elapsed_seconds": round(result.elapsed_seconds, 4),
        "created_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
    }


def write_result(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, ensure_ascii=False, indent=2)
        fh.write("\n")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fill a small number grid under adjacency and global constraints."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset",
        type=str,
        default="prime-parity-5x5",
        choices=sorted(PRESETS),
        help="Built-in puzzle to solve (default: prime-parity-5x5).",
    )
    source.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a JSON puzzle configuration; overrides --preset.",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Per-attempt limit on candidate placements.",
    )
    parser.add_argument(
        "--time-limit",
        type=float,
        default=None,
        help="Per-attempt wall-clock limit in seconds.",
    )
    parser.add_argument(
        "--format",
        type=str,
        default="both",
        choices=["flat", "rows", "both"],
        help="How to print the solution (default: both).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the result as JSON to this file.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write DEBUG logs to this file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level for console output (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level)
    if args.log_file is not None:
        logger.add(args.log_file, level="DEBUG", encoding="utf-8")

    config = load_config(args.config) if args.config else get_preset(args.preset)
    logger.info("Solving {}", describe(config))

    result = solve_puzzle(
        config,
        max_steps=args.max_steps,
        time_limit=args.time_limit,
    )

    issues: List[str] = []
    if result.solved:
        report = check_grid(result.solution, config)
        issues = report.issues
        if issues:
            logger.error("Solution failed validation:")
            for issue in issues:
                logger.error("  - {}", issue)
        else:
            if args.format in ("flat", "both"):
                print(format_flat(result.solution))
            if args.format in ("rows", "both"):
                print(format_rows(result.solution, config.size))
            logger.info(
                "Solved in {:.3f}s after {} step(s); validation passed.",
                result.elapsed_seconds,
                result.steps,
            )
    else:
        logger.warning("{} ({} step(s), {:.3f}s)", result.message, result.steps, result.elapsed_seconds)

    if args.output is not None:
        write_result(args.output.resolve(), result_payload(config, result, issues))
        logger.info("Result written to {}", args.output)

    return 0 if result.solved and not issues else 1


if __name__ == "__main__":
    sys.exit(main())
