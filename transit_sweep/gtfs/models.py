"""Data models for GTFS records, solver state and results."""

from collections import deque
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Station:
    """GTFS stop with coordinates and optional parent station."""

    station_id: str
    name: str
    lat: float
    lon: float
    parent_id: str | None = None


@dataclass(frozen=True)
class StopTime:
    """GTFS stop time."""

    trip_id: str
    stop_id: str
    arrival_time: int  # seconds since midnight
    departure_time: int  # seconds since midnight
    stop_sequence: int


@dataclass(frozen=True)
class TripStop:
    """One stop of a trip, in travel order."""

    station_id: str
    arrival_time: int
    departure_time: int


@dataclass(frozen=True)
class Trip:
    """Scheduled trip with its ordered stops."""

    route_id: str
    trip_id: str
    service_id: str
    stop_times: tuple[TripStop, ...] = ()


@dataclass(frozen=True)
class Transfer:
    """GTFS transfer between two stops."""

    from_stop_id: str
    to_stop_id: str
    transfer_type: int = 0


@dataclass(frozen=True)
class Departure:
    """One-hop edge from an origin station to the next stop of the same trip."""

    trip_id: str
    route_id: str
    departure_time: int
    next_station_id: str
    arrival_time: int


class StepKind(str, Enum):
    """Kind of itinerary step."""

    RIDE = "RIDE"
    TRANSFER = "TRANSFER"
    WAIT = "WAIT"
    WALK = "WALK"


class SolveState(str, Enum):
    """Solver run state."""

    RUNNING = "RUNNING"
    DONE = "DONE"
    STOPPED = "STOPPED"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class Move:
    """Best scored candidate picked by the move generator."""

    kind: StepKind
    next_station_id: str
    departure_time: int  # effective, after any day wraparound
    arrival_time: int
    score: float
    route_id: str | None = None
    trip_id: str | None = None


@dataclass(frozen=True)
class RouteStep:
    """One step of a finished itinerary."""

    kind: StepKind
    from_station: str
    to_station: str
    start_time: int
    end_time: int
    stations_covered: tuple[str, ...] = ()
    description: str = ""
    route_id: str | None = None


@dataclass
class RunState:
    """Mutable bookkeeping owned by a single solver run."""

    current_station_id: str
    current_time: int
    visited_complexes: set[str] = field(default_factory=set)
    tabu: deque[str] = field(default_factory=lambda: deque(maxlen=20))
    last_route_id: str | None = None
    last_step_kind: StepKind | None = None
    last_walk_step: int = -100
    steps: int = 0
    steps_since_last_visit: int = 0


@dataclass(frozen=True)
class TraceEvent:
    """Structured diagnostic emitted during a run."""

    step: int
    code: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class SolveResult:
    """Finished itinerary plus summary statistics."""

    state: SolveState
    itinerary: list[RouteStep]
    total_time: str
    total_seconds: int
    stations_visited_count: int
    total_complexes: int
    visited_station_ids: frozenset[str]
    start_time_iso: str
    start_station_id: str
    steps: int = 0
    trace: list[TraceEvent] = field(default_factory=list)

    @property
    def stop_reason(self) -> str | None:
        """Code of the trace event that ended a STOPPED run, if any."""
        for event in reversed(self.trace):
            if event.code.startswith("stop."):
                return event.code
        return None


@dataclass
class ValidationReport:
    """Report from validation process."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)


@dataclass
class SolverConfig:
    """Tuning values and run options for the route solver."""

    stuck_threshold: int = 30  # steps without a new complex
    walk_cooldown: int = 5  # steps between walks
    tabu_capacity: int = 20
    wrap_lookahead: int = 10  # departures considered after day wraparound
    transfer_dwell: int = 120  # seconds
    walk_speed: float = 1.4  # m/s
    degree_scale: float = 100000  # planar degrees -> meters
    max_walk_distance: float = 0.02  # planar degrees
    max_steps: int = 3000
    continuity_bonus: float = 100
    distance_weight: float = 100000
    walk_penalty_weight: float = 10000
    time_penalty_divisor: float = 100
    start_station_id: str | None = None
    service_ids: frozenset[str] | None = None
    service_date: date = date(1970, 1, 1)
