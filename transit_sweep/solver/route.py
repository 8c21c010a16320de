"""Greedy route solver visiting every station complex."""

import logging
from collections import deque
from datetime import UTC, datetime, time, timedelta
from typing import Any

from transit_sweep.gtfs.models import (
    Move,
    RouteStep,
    RunState,
    SolverConfig,
    SolveResult,
    SolveState,
    Station,
    StepKind,
    TraceEvent,
)
from transit_sweep.solver.moves import MoveGenerator
from transit_sweep.transform.complexes import StationComplexResolver
from transit_sweep.transform.schedule import ScheduleIndex

logger = logging.getLogger(__name__)


def format_duration(seconds: int) -> str:
    """Format seconds as ``"{h}h {m}m {s}s"``."""
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h}h {m}m {s}s"


class RouteSolver:
    """Run the greedy sweep from a start time until every complex is visited.

    A run ends DONE when all complexes are visited, STOPPED when no move is
    left, or ABORTED when the step budget runs out. Partial itineraries are
    returned for every terminal state.
    """

    def __init__(
        self,
        stations: list[Station],
        complexes: StationComplexResolver,
        schedule: ScheduleIndex,
        config: SolverConfig | None = None,
    ) -> None:
        self.config = config or SolverConfig()
        self.stations = stations
        self.complexes = complexes
        self.schedule = schedule
        self.moves = MoveGenerator(stations, complexes, schedule, self.config)

    def start_station(self) -> str:
        """Reference start station, failing fast when there is none."""
        if not self.stations:
            raise ValueError("No stations loaded")

        start_id = self.config.start_station_id
        if start_id is None:
            start_id = self.schedule.first_station()
            if start_id is None:
                raise ValueError("No scheduled trips found")

        if start_id not in self.moves.station_by_id:
            raise ValueError(f"Start station {start_id} is not a known station")
        return start_id

    def solve(self, start_time: int) -> SolveResult:
        """Build an itinerary starting at ``start_time`` seconds after midnight."""
        config = self.config
        start_id = self.start_station()

        state = RunState(
            current_station_id=start_id,
            current_time=start_time,
            tabu=deque(maxlen=config.tabu_capacity),
        )
        start_complex = self.complexes.complex_of(start_id)
        state.visited_complexes.add(start_complex)
        state.tabu.append(start_complex)

        itinerary: list[RouteStep] = []
        trace: list[TraceEvent] = []
        total_complexes = len(self.complexes)

        self._trace(
            trace,
            state,
            "start",
            f"Started at {start_id} (complex {start_complex})",
            complexes=total_complexes,
        )

        status = SolveState.RUNNING
        while status is SolveState.RUNNING:
            if len(state.visited_complexes) >= total_complexes:
                status = SolveState.DONE
                break
            if state.steps >= config.max_steps:
                status = SolveState.ABORTED
                self._trace(
                    trace,
                    state,
                    "abort.step_budget",
                    f"Step budget of {config.max_steps} exhausted",
                    visited=len(state.visited_complexes),
                )
                break

            state.steps += 1
            move = self.moves.best_move(state)
            if move is None:
                status = SolveState.STOPPED
                self._diagnose_stop(trace, state, start_time)
                break

            self._apply(state, move, itinerary, trace)

        total_seconds = state.current_time - start_time
        visited_station_ids = frozenset(
            station.station_id
            for station in self.stations
            if self.complexes.complex_of(station.station_id) in state.visited_complexes
        )
        start_dt = datetime.combine(config.service_date, time(), tzinfo=UTC) + timedelta(
            seconds=start_time
        )

        logger.info(
            f"Solver finished {status.value} after {state.steps} steps: "
            f"{len(state.visited_complexes)}/{total_complexes} complexes "
            f"in {format_duration(total_seconds)}"
        )

        return SolveResult(
            state=status,
            itinerary=itinerary,
            total_time=format_duration(total_seconds),
            total_seconds=total_seconds,
            stations_visited_count=len(state.visited_complexes),
            total_complexes=total_complexes,
            visited_station_ids=visited_station_ids,
            start_time_iso=start_dt.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            start_station_id=start_id,
            steps=state.steps,
            trace=trace,
        )

    def _apply(
        self,
        state: RunState,
        move: Move,
        itinerary: list[RouteStep],
        trace: list[TraceEvent],
    ) -> None:
        current_id = state.current_station_id
        next_id = move.next_station_id
        was_stuck = self.moves.is_stuck(state)

        if move.departure_time > state.current_time:
            itinerary.append(
                RouteStep(
                    kind=StepKind.WAIT,
                    from_station=current_id,
                    to_station=current_id,
                    start_time=state.current_time,
                    end_time=move.departure_time,
                    description=f"Wait for route {move.route_id}",
                )
            )

        itinerary.append(
            RouteStep(
                kind=move.kind,
                from_station=current_id,
                to_station=next_id,
                start_time=move.departure_time,
                end_time=move.arrival_time,
                stations_covered=(next_id,),
                description=self._describe(move),
                route_id=move.route_id,
            )
        )
        state.current_time = move.arrival_time

        next_complex = self.complexes.complex_of(next_id)
        reached_new = next_complex not in state.visited_complexes
        # Only riding counts as visiting
        if move.kind is StepKind.RIDE:
            state.visited_complexes.add(self.complexes.complex_of(current_id))
            state.visited_complexes.add(next_complex)

        state.tabu.append(next_complex)
        state.current_station_id = next_id
        state.last_route_id = move.route_id
        state.last_step_kind = move.kind
        if move.kind is StepKind.WALK:
            state.last_walk_step = state.steps

        if reached_new:
            state.steps_since_last_visit = 0
        else:
            state.steps_since_last_visit += 1

        if state.steps % 10 == 0 or move.score < 0:
            self._trace(
                trace,
                state,
                "step",
                f"{move.kind.value} to {next_id} ({next_complex}), score {move.score:.0f}",
                score=move.score,
                visited=len(state.visited_complexes),
                since_last_visit=state.steps_since_last_visit,
            )
        if not was_stuck and self.moves.is_stuck(state):
            self._trace(
                trace,
                state,
                "stuck",
                f"No new complex for {state.steps_since_last_visit} steps, relaxing walk rules",
            )

    def _describe(self, move: Move) -> str:
        station = self.moves.station_by_id.get(move.next_station_id)
        name = station.name if station else move.next_station_id
        if move.kind is StepKind.RIDE:
            return f"Ride route {move.route_id} to {name}"
        if move.kind is StepKind.TRANSFER:
            return f"Transfer to {name}"
        return f"Walk to {name}"

    def _diagnose_stop(self, trace: list[TraceEvent], state: RunState, start_time: int) -> None:
        station_id = state.current_station_id
        departures = self.schedule.departures(station_id)
        elapsed = format_duration(state.current_time - start_time)

        if not departures:
            self._trace(
                trace,
                state,
                "stop.dead_end",
                f"No departures in schedule for {station_id} after {elapsed}",
            )
            return

        after = [d for d in departures if d.departure_time >= state.current_time]
        data: dict[str, Any] = {
            "departures": len(departures),
            "first_departure": departures[0].departure_time,
            "last_departure": departures[-1].departure_time,
        }
        if not after:
            self._trace(
                trace,
                state,
                "stop.no_departure_after_wrap",
                f"No usable departure from {station_id} after wrapping past {elapsed}",
                **data,
            )
        else:
            self._trace(
                trace,
                state,
                "stop.all_candidates_rejected",
                f"All {len(after)} departures from {station_id} were rejected",
                candidates=[f"{d.route_id}->{d.next_station_id}" for d in after[:5]],
                **data,
            )

    @staticmethod
    def _trace(
        trace: list[TraceEvent], state: RunState, code: str, message: str, **data: Any
    ) -> None:
        trace.append(TraceEvent(step=state.steps, code=code, message=message, data=data))
        if code.startswith(("stop.", "abort.")):
            logger.info(f"[{code}] Step {state.steps}: {message}")
        else:
            logger.debug(f"[{code}] Step {state.steps}: {message}")
