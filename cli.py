#!/usr/bin/env python3
"""
cli.py — Collapse simulator CLI entry point.

Runs the collapse simulator over a world file for a number of steps, or
validates a collapse configuration.

Usage:
    # Run three steps over the sample world
    python cli.py run --config configs/collapse.yaml \\
        --world configs/sample_world.yaml --steps 3

    # Save per-step reports
    python cli.py run --config configs/collapse.yaml \\
        --world configs/sample_world.yaml --steps 5 --output out/run.json

    # Check a config without running anything
    python cli.py validate --config configs/collapse.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def cmd_run(args: argparse.Namespace) -> None:
    """Run the simulator over a world file."""
    from collapse_engine.analysis.metrics import degree_histogram, summary_statistics
    from collapse_engine.config_loader import load_collapse_params, load_world
    from collapse_engine.simulation.runner import SimulationRunner

    params = load_collapse_params(args.config, seed=args.seed)
    world = load_world(args.world)
    runner = SimulationRunner(world, params)

    print(f"\n  Collapse simulator — {Path(args.world).name}")
    print(f"  Steps: {args.steps}, Seed: {params.seed}, "
          f"Blockages: {'on' if params.create_road_blockages else 'off'}")
    print()

    reports = runner.run(args.steps)
    for r in reports:
        print(f"  step {r.time:>4d}: {len(r.collapse.changed):>4d} damaged, "
              f"{len(r.blockades):>4d} blockades, repair cost {r.total_repair_cost}")

    stats = summary_statistics(reports)
    print("\n  Summary:")
    for key, value in stats.items():
        print(f"    {key:<22s} {value:g}")
    print("\n  Collapse degrees:")
    for degree, n in degree_histogram(world).items():
        print(f"    {degree:<22s} {n}")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(
                {"summary": stats, "steps": runner.recorder.to_dicts()},
                f, indent=2, default=str,
            )
        print(f"\n  Results saved to {output_path}")


def cmd_validate(args: argparse.Namespace) -> None:
    """Load a collapse config and report problems."""
    from collapse_engine.config_loader import load_collapse_params
    from collapse_engine.core.damage import CollapseStats
    from collapse_engine.core.params import ConfigError

    try:
        params = load_collapse_params(args.config)
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"\n  {args.config}: OK")
    for code, probs in params.probabilities.items():
        stats = CollapseStats.from_probabilities(code, probs)
        print(f"    {code.name.lower():<10s} destroyed<{stats.p_destroyed:.3f} "
              f"severe<{stats.p_severe:.3f} moderate<{stats.p_moderate:.3f} "
              f"slight<{stats.p_slight:.3f}")
        if stats.p_slight > 1.0:
            print(f"    WARNING: {code.name.lower()} probabilities sum to {stats.p_slight:.3f} > 1")
    print()


def main():
    parser = argparse.ArgumentParser(
        prog="collapse",
        description="Building collapse and road blockade simulator",
    )
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # ── run ──────────────────────────────────────────────────────── #
    p_run = subparsers.add_parser("run", help="Run the simulator over a world file")
    p_run.add_argument("--config", type=str, default="configs/collapse.yaml",
                       help="Path to collapse config YAML")
    p_run.add_argument("--world", type=str, default="configs/sample_world.yaml",
                       help="Path to world YAML")
    p_run.add_argument("--steps", type=int, default=3)
    p_run.add_argument("--seed", type=int, default=None,
                       help="Override collapse.seed")
    p_run.add_argument("--output", type=str, default=None,
                       help="Save step reports JSON to this path")
    p_run.set_defaults(func=cmd_run)

    # ── validate ─────────────────────────────────────────────────── #
    p_val = subparsers.add_parser("validate", help="Validate a collapse config")
    p_val.add_argument("--config", type=str, default="configs/collapse.yaml")
    p_val.set_defaults(func=cmd_validate)

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not args.command:
        parser.print_help()
        sys.exit(0)

    args.func(args)


if __name__ == "__main__":
    main()
