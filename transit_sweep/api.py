"""Public API for transit-sweep."""

import logging
from collections.abc import Iterable
from concurrent.futures import Executor, Future, ProcessPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from transit_sweep.gtfs.models import (
    SolverConfig,
    SolveResult,
    Station,
    Transfer,
    Trip,
    ValidationReport,
)
from transit_sweep.gtfs.reader import GTFSReader
from transit_sweep.gtfs.validator import GTFSValidator
from transit_sweep.solver.route import RouteSolver
from transit_sweep.transform.complexes import StationComplexResolver
from transit_sweep.transform.schedule import ScheduleIndex

logger = logging.getLogger(__name__)


@dataclass
class Network:
    """Read-only solver inputs; safe to reuse across runs."""

    stations: list[Station]
    complexes: StationComplexResolver
    schedule: ScheduleIndex


_network_cache: dict[tuple[str, int, frozenset[str] | None], Network] = {}


def build_network(
    stations: list[Station],
    trips: Iterable[Trip],
    transfers: Iterable[Transfer] = (),
    config: SolverConfig | None = None,
) -> Network:
    """Build the complex partition and departure index from parsed records."""
    if config is None:
        config = SolverConfig()

    complexes = StationComplexResolver(stations, transfers)
    schedule = ScheduleIndex(
        trips, wrap_lookahead=config.wrap_lookahead, service_ids=config.service_ids
    )
    return Network(stations=stations, complexes=complexes, schedule=schedule)


def load_network(
    gtfs_path: str, config: SolverConfig | None = None, use_cache: bool = True
) -> Network:
    """
    Read, validate and index a GTFS directory.

    Args:
        gtfs_path: Path to GTFS directory
        config: Optional solver configuration (index options)
        use_cache: Reuse a network already built for the same path and options

    Returns:
        Network ready to solve
    """
    if config is None:
        config = SolverConfig()

    key = (str(Path(gtfs_path).resolve()), config.wrap_lookahead, config.service_ids)
    if use_cache and key in _network_cache:
        logger.info(f"Using cached network for {gtfs_path}")
        return _network_cache[key]

    reader = GTFSReader(gtfs_path)
    reader.read_all()

    validator = GTFSValidator(reader)
    report = validator.validate()
    if not report.valid:
        raise ValueError(f"GTFS validation failed with {len(report.errors)} errors")

    network = build_network(reader.stations, reader.trips, reader.transfers, config)
    if use_cache:
        _network_cache[key] = network
    return network


def clear_network_cache() -> None:
    """Drop every cached network."""
    _network_cache.clear()


def solve(network: Network, start_time: int, config: SolverConfig | None = None) -> SolveResult:
    """Run the route solver over a prepared network."""
    solver = RouteSolver(network.stations, network.complexes, network.schedule, config)
    return solver.solve(start_time)


def solve_feed(
    gtfs_path: str, start_time: int, config: SolverConfig | None = None
) -> SolveResult:
    """
    Load a GTFS directory and solve it from ``start_time``.

    Args:
        gtfs_path: Path to GTFS directory
        start_time: Seconds after midnight
        config: Optional solver configuration

    Returns:
        SolveResult with the itinerary and summary
    """
    logger.info(f"Solving {gtfs_path} from t={start_time}s")
    started = datetime.now(UTC)

    network = load_network(gtfs_path, config)
    result = solve(network, start_time, config)

    elapsed = (datetime.now(UTC) - started).total_seconds()
    logger.info(f"Solve completed in {elapsed:.2f}s")
    return result


def solve_in_background(
    gtfs_path: str,
    start_time: int,
    config: SolverConfig | None = None,
    executor: Executor | None = None,
) -> Future[SolveResult]:
    """Run ``solve_feed`` in a worker process and return its future.

    Without an executor a single-worker process pool is created and shut
    down once the job finishes.
    """
    if executor is not None:
        return executor.submit(solve_feed, gtfs_path, start_time, config)

    pool = ProcessPoolExecutor(max_workers=1)
    future = pool.submit(solve_feed, gtfs_path, start_time, config)
    pool.shutdown(wait=False)
    return future


def validate(gtfs_path: str) -> ValidationReport:
    """
    Validate a GTFS directory for solving.

    Args:
        gtfs_path: Path to GTFS directory

    Returns:
        ValidationReport with results
    """
    logger.info(f"Validating feed: {gtfs_path}")

    reader = GTFSReader(gtfs_path)
    reader.read_all()
    return GTFSValidator(reader).validate()
