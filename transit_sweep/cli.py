"""Command-line interface for transit-sweep."""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from transit_sweep.api import solve_feed, validate
from transit_sweep.gtfs.models import SolverConfig
from transit_sweep.gtfs.reader import GTFSReader
from transit_sweep.output.json import write_itinerary_json
from transit_sweep.version import VERSION


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_start_time(value: str) -> int:
    """Accept seconds after midnight or HH:MM:SS."""
    if ":" in value:
        return GTFSReader._parse_time(value)
    return int(value)


def cmd_solve(args: argparse.Namespace) -> int:
    """Execute solve command."""
    setup_logging(args.verbose)

    try:
        config = SolverConfig(
            max_steps=args.max_steps,
            max_walk_distance=args.max_walk_distance,
            walk_speed=args.speed_walk,
            start_station_id=args.start_station,
            service_ids=frozenset(args.service) if args.service else None,
            service_date=date.fromisoformat(args.service_date),
        )
        result = solve_feed(args.input, parse_start_time(args.start_time), config)
        path = write_itinerary_json(Path(args.output), result, include_trace=args.trace)
        print(f"\nSolve finished: {result.state.value}")
        print(f"Visited: {result.stations_visited_count}/{result.total_complexes} complexes")
        print(f"Total time: {result.total_time}")
        if result.stop_reason:
            print(f"Stop reason: {result.stop_reason}")
        print(f"Output: {path}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Solve failed")
        return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Execute validate command."""
    setup_logging(args.verbose)

    try:
        report = validate(args.input)
        if report.valid:
            print("\nValidation successful!")
            print(f"Stats: {report.stats}")
            if report.warnings:
                print(f"Warnings ({len(report.warnings)}):")
                for warning in report.warnings:
                    print(f"  - {warning}")
            return 0
        else:
            print(f"\nValidation failed with {len(report.errors)} errors:")
            for error in report.errors:
                print(f"  - {error}")
            return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Validation failed")
        return 1


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="transit-sweep",
        description="Plan an itinerary that visits every station complex of a GTFS feed",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve a GTFS feed")
    solve_parser.add_argument("--input", required=True, help="Path to GTFS directory")
    solve_parser.add_argument(
        "--output", default="./sweep_output", help="Output directory (default: ./sweep_output)"
    )
    solve_parser.add_argument(
        "--start-time",
        default="0",
        help="Start time as seconds after midnight or HH:MM:SS (default: 0)",
    )
    solve_parser.add_argument(
        "--start-station",
        default=None,
        help="Start station id (default: first station with a departure)",
    )
    solve_parser.add_argument(
        "--service",
        action="append",
        default=None,
        help="Only use trips of this service_id (repeatable)",
    )
    solve_parser.add_argument(
        "--service-date",
        default="1970-01-01",
        help="Date used for the ISO start timestamp (default: 1970-01-01)",
    )
    solve_parser.add_argument(
        "--max-steps",
        type=int,
        default=3000,
        help="Step budget before aborting (default: 3000)",
    )
    solve_parser.add_argument(
        "--max-walk-distance",
        type=float,
        default=0.02,
        help="Walk cap in planar degrees (default: 0.02)",
    )
    solve_parser.add_argument(
        "--speed-walk",
        type=float,
        default=1.4,
        help="Walking speed in m/s (default: 1.4)",
    )
    solve_parser.add_argument(
        "--trace",
        type=lambda x: x.lower() == "true",
        default=False,
        help="Include the solver trace in itinerary.json (default: false)",
    )
    solve_parser.set_defaults(func=cmd_solve)

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a GTFS feed")
    validate_parser.add_argument("--input", required=True, help="Path to GTFS directory")
    validate_parser.set_defaults(func=cmd_validate)

    # Parse and execute
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
