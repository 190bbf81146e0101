"""
Command-line interface for errsim.

Runs one of the bundled scenarios with its naive or correct solution
under the selected strictness policy, either exhaustively or along a
single replayed path.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

import errsim
from errsim.core.config import PEDANTIC, SKIP_ERRORS, Config
from errsim.core.enumerator import Enumerator, ProtocolViolation, RunResult
from errsim.scenarios.solutions import CATALOG, get_dare
from errsim.utils.logger import LogLevel, SimulationLogger
from errsim.utils.visualization import ExecutionTreeVisualizer


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the errsim CLI."""
    parser = argparse.ArgumentParser(
        prog="errsim",
        description=(
            "errsim: exhaustive error-path simulation - "
            "runs a scenario once for every combination of "
            "fault and abort outcomes of its operations"
        ),
    )

    parser.add_argument(
        "scenario",
        choices=sorted(CATALOG),
        help="Scenario to run",
    )
    parser.add_argument(
        "-s",
        "--solution",
        choices=["naive", "correct"],
        default="correct",
        help="Which bundled solution to run (default: correct)",
    )

    policy = parser.add_argument_group("policy")
    policy.add_argument(
        "--pedantic",
        action="store_true",
        help="Require every resource to be released after an abort",
    )
    policy.add_argument(
        "--abort-order",
        action="store_true",
        help="Require releases after an abort to carry the first abort",
    )
    policy.add_argument(
        "--release-on-abort",
        action="store_true",
        help="Report resources left unreleased by an abort",
    )
    policy.add_argument(
        "--dare",
        action="store_true",
        help="Fail hard on the first violation of a naive solution",
    )

    parser.add_argument(
        "--replay",
        metavar="PATH",
        default=None,
        help='Run a single path, e.g. "client=NoFault, reader=Fault"',
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=["silent", "normal", "verbose"],
        default="normal",
        help="Output level (default: normal)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        type=int,
        choices=[0, 1, 2, 3],
        default=0,
        help="Debug level 0-3 (default: 0)",
    )
    parser.add_argument(
        "--visualize",
        nargs="?",
        const="__stdout__",
        default=None,
        metavar="FILE",
        help="Generate execution tree visualization (optionally to FILE)",
    )
    parser.add_argument(
        "--visualize-ascii",
        action="store_true",
        help="Print ASCII execution tree to terminal",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print statistics after the run",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"errsim {errsim.__version__}",
    )

    return parser


def _resolve_log_level(output: str, debug: int) -> LogLevel:
    """Determine the effective log level from output and debug settings."""
    if debug >= 3:
        return LogLevel.DEBUG
    if output == "verbose" or debug >= 1:
        return LogLevel.VERBOSE
    if output == "silent":
        return LogLevel.SILENT
    return LogLevel.NORMAL


def _resolve_config(args: argparse.Namespace, naive: bool) -> Config:
    """Map policy flags to a Config."""
    if args.pedantic:
        config = PEDANTIC
    else:
        config = Config(
            ignore_abort_order=not args.abort_order,
            require_release_on_abort=args.release_on_abort,
        )
    # Naive solutions are expected to fail; keep going unless dared.
    if naive and not args.dare:
        config = config | SKIP_ERRORS
    return config


def main(argv: Optional[list] = None) -> None:
    """Entry point for the ``errsim`` CLI command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _run(args)
    except SystemExit:
        raise
    except ProtocolViolation as exc:
        print(f"Protocol violation:\n{exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def _run(args: argparse.Namespace) -> None:
    """Execute the selected scenario."""
    dare = get_dare(args.scenario)
    naive = args.solution == "naive"
    config = _resolve_config(args, naive)

    log_level = _resolve_log_level(args.output, args.debug)
    logger = SimulationLogger(level=log_level, stream=sys.stdout)
    logger.info(f"Scenario: {dare.name} ({dare.description})")
    logger.info(f"Solution: {args.solution}", config=config)

    enumerator = Enumerator(config, logger)
    scenario = dare.solution(args.solution)
    if args.replay is not None:
        result = enumerator.replay(scenario, args.replay)
    else:
        result = enumerator.run(scenario)

    _render(args, result)

    # Statistics (skip if verbose already printed them)
    if args.stats and log_level.value < LogLevel.VERBOSE.value:
        print()
        print("=== Statistics ===")
        for key, value in result.statistics.items():
            label = key.replace("_", " ").title()
            print(f"  {label}: {value}")

    sys.exit(0)


def _render(args: argparse.Namespace, result: RunResult) -> None:
    """Write the requested visualizations of the execution tree."""
    if not args.visualize_ascii and args.visualize is None:
        return
    viz = ExecutionTreeVisualizer(result)

    if args.visualize_ascii:
        print()
        print(viz.to_ascii())

    if args.visualize is None:
        return
    if args.visualize == "__stdout__":
        print(viz.to_dot())
        return
    filepath = Path(args.visualize)
    suffix = filepath.suffix.lower()
    if suffix == ".json":
        filepath.write_text(viz.to_json())
    elif suffix in (".png", ".pdf", ".svg"):
        try:
            viz.save_image(filepath)
        except RuntimeError as e:
            print(f"Warning: {e}", file=sys.stderr)
            viz.save_dot(filepath.with_suffix(".dot"))
    else:
        viz.save_dot(filepath)
