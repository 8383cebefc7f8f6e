"""
Command-line interface for the projection explorer.
"""

import argparse
import logging
import sys

from projection_explorer.errors import ProjectionExplorerError
from projection_explorer.explorer import ProjectionExplorer
from projection_explorer.model import DEFAULT_UTILIZATION_WEIGHT
from projection_explorer.problem import ExplorationOptions, LoopNest
from projection_explorer.report import write_csv, write_yaml
from projection_explorer.utils import parse_vector, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projection-explorer",
        description="Projection Explorer - space-time mapping exploration for loop nests"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # =========================================
    # explore command
    # =========================================
    explore_parser = subparsers.add_parser(
        "explore",
        help="Score and rank projection vectors"
    )
    explore_parser.add_argument(
        "-i", "--input",
        required=True,
        help="Path to problem YAML file"
    )
    explore_parser.add_argument(
        "-m", "--magnitude-bound",
        type=int,
        default=3,
        help="Bound on projection vector coordinates and norm (default: 3)"
    )
    explore_parser.add_argument(
        "-n", "--pe-inefficiency",
        type=int,
        default=100,
        help="Largest utilization kept in the output, 1-100 (default: 100)"
    )
    explore_parser.add_argument(
        "-s", "--pipeline-stages",
        type=int,
        default=1,
        help="Minimum delay on every dependency, 1-100 (default: 1)"
    )
    explore_parser.add_argument(
        "--weight",
        type=int,
        default=DEFAULT_UTILIZATION_WEIGHT,
        help=f"Utilization weight of the schedule objective (default: {DEFAULT_UTILIZATION_WEIGHT})"
    )
    explore_parser.add_argument(
        "--full-box",
        action="store_true",
        help="Visit both signs of every vector"
    )
    explore_parser.add_argument(
        "--vector",
        help="Evaluate a single projection vector, e.g. 1,0,-1"
    )
    explore_parser.add_argument(
        "-o", "--output",
        help="Output file for ranked results (YAML format)"
    )
    explore_parser.add_argument(
        "--csv",
        help="Output file for ranked results (CSV format)"
    )
    explore_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    # =========================================
    # info command
    # =========================================
    info_parser = subparsers.add_parser(
        "info",
        help="Display problem information"
    )
    info_parser.add_argument(
        "-i", "--input",
        required=True,
        help="Path to problem YAML file"
    )

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    # =========================================
    # Execute command
    # =========================================
    if args.command == "explore":
        return cmd_explore(args)
    elif args.command == "info":
        return cmd_info(args)
    else:
        parser.print_help()
        return 1


def cmd_explore(args) -> int:
    """Execute explore command."""
    setup_logging(args.verbose)

    print("Projection Explorer")
    print("=" * 60)
    print(f"Problem: {args.input}")
    print(f"Magnitude bound: {args.magnitude_bound}")
    print(f"PE inefficiency: {args.pe_inefficiency}")
    print(f"Pipeline stages: {args.pipeline_stages}")
    print("=" * 60)

    try:
        options = ExplorationOptions(
            magnitude_bound=args.magnitude_bound,
            pe_inefficiency=args.pe_inefficiency,
            pipeline_stages=args.pipeline_stages,
            utilization_weight=args.weight,
            full_box=args.full_box,
        )
        options.validate()
        problem = LoopNest.from_yaml(args.input)
        explorer = ProjectionExplorer(problem, options)

        if args.vector:
            solution = explorer.evaluate(parse_vector(args.vector, problem.dimensions))
            print(solution.pretty_print(problem.parameter_names))
            return 0

        result = explorer.run()
        result.print_summary()

        for i, solution in enumerate(result.ranked):
            print(f"\n--- Rank {i + 1} ---")
            print(solution.pretty_print(problem.parameter_names))

        if args.output:
            write_yaml(result, args.output)
            print(f"\nResults saved to: {args.output}")
        if args.csv:
            write_csv(result.ranked, args.csv, problem.parameter_names)
            print(f"CSV saved to: {args.csv}")

        return 0

    except ProjectionExplorerError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def cmd_info(args) -> int:
    """Execute info command."""
    try:
        problem = LoopNest.from_yaml(args.input)
    except ProjectionExplorerError as e:
        print(f"Error: {e}")
        return 1

    print("Problem Information")
    print("=" * 60)
    print(problem.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
