"""Move generation and scoring for the route solver."""

import logging
import math

from transit_sweep.gtfs.models import Move, RunState, SolverConfig, Station, StepKind
from transit_sweep.transform.complexes import StationComplexResolver
from transit_sweep.transform.schedule import ScheduleIndex

logger = logging.getLogger(__name__)


def planar_distance(a: Station, b: Station) -> float:
    """Euclidean distance in raw (lat, lon) degrees."""
    dx = b.lon - a.lon
    dy = b.lat - a.lat
    return math.sqrt(dx * dx + dy * dy)


def walk_seconds(distance: float, config: SolverConfig) -> int:
    """Walking time for a planar-degree distance."""
    return math.ceil(distance * config.degree_scale / config.walk_speed)


class MoveGenerator:
    """Pick the best next move for a run state.

    Holds read-only references to the network; ``best_move`` never mutates
    the state it is given.
    """

    def __init__(
        self,
        stations: list[Station],
        complexes: StationComplexResolver,
        schedule: ScheduleIndex,
        config: SolverConfig | None = None,
    ) -> None:
        self.stations = stations
        self.station_by_id = {station.station_id: station for station in stations}
        self.complexes = complexes
        self.schedule = schedule
        self.config = config or SolverConfig()

    def is_stuck(self, state: RunState) -> bool:
        return state.steps_since_last_visit > self.config.stuck_threshold

    def must_ride(self, state: RunState) -> bool:
        return state.last_step_kind in (StepKind.TRANSFER, StepKind.WALK) and not self.is_stuck(
            state
        )

    def nearest_unvisited(self, state: RunState) -> tuple[Station, float] | None:
        """Closest station whose complex has not been visited yet."""
        current = self.station_by_id[state.current_station_id]
        target: Station | None = None
        best = math.inf
        for station in self.stations:
            if self.complexes.complex_of(station.station_id) in state.visited_complexes:
                continue
            distance = planar_distance(current, station)
            if distance < best:
                best = distance
                target = station
        if target is None:
            return None
        return target, best

    def best_move(self, state: RunState) -> Move | None:
        """Best scoring RIDE, TRANSFER or WALK move, or None when there is none."""
        found = self.nearest_unvisited(state)
        if found is None:
            return None
        target, distance_before = found

        if state.steps % 10 == 0:
            logger.debug(
                f"Step {state.steps}: nearest unvisited {target.station_id} "
                f"({target.name}, dist {distance_before:.4f})"
            )

        best = self._best_ride(state, target, distance_before)
        if self.must_ride(state):
            return best

        for candidate in (
            self._best_transfer(state, target, distance_before),
            self._best_walk(state, target, distance_before),
        ):
            if candidate is not None and (best is None or candidate.score > best.score):
                best = candidate
        return best

    def _improvement(
        self, station_id: str, target: Station, distance_before: float
    ) -> float | None:
        station = self.station_by_id.get(station_id)
        if station is None:
            return None
        return (distance_before - planar_distance(station, target)) * self.config.distance_weight

    def _best_ride(self, state: RunState, target: Station, distance_before: float) -> Move | None:
        config = self.config
        best: Move | None = None
        for departure, effective in self.schedule.reachable(
            state.current_station_id, state.current_time
        ):
            score = self._improvement(departure.next_station_id, target, distance_before)
            if score is None:
                continue
            if state.last_route_id and departure.route_id == state.last_route_id:
                score += config.continuity_bonus
            score -= (effective - state.current_time) / config.time_penalty_divisor

            if best is None or score > best.score:
                best = Move(
                    kind=StepKind.RIDE,
                    next_station_id=departure.next_station_id,
                    departure_time=effective,
                    arrival_time=effective + (departure.arrival_time - departure.departure_time),
                    score=score,
                    route_id=departure.route_id,
                    trip_id=departure.trip_id,
                )
        return best

    def _best_transfer(
        self, state: RunState, target: Station, distance_before: float
    ) -> Move | None:
        config = self.config
        ready_time = state.current_time + config.transfer_dwell
        complex_id = self.complexes.complex_of(state.current_station_id)

        best: Move | None = None
        for sibling in self.complexes.siblings(complex_id):
            if sibling.station_id == state.current_station_id:
                continue

            best_improvement = -math.inf
            for departure, _ in self.schedule.reachable(sibling.station_id, ready_time):
                improvement = self._improvement(departure.next_station_id, target, distance_before)
                if improvement is not None and improvement > best_improvement:
                    best_improvement = improvement
            if best_improvement == -math.inf:
                continue

            score = best_improvement - config.transfer_dwell
            if best is None or score > best.score:
                best = Move(
                    kind=StepKind.TRANSFER,
                    next_station_id=sibling.station_id,
                    departure_time=state.current_time,
                    arrival_time=ready_time,
                    score=score,
                )
        return best

    def _best_walk(self, state: RunState, target: Station, distance_before: float) -> Move | None:
        config = self.config
        stuck = self.is_stuck(state)
        cooldown = 0 if stuck else config.walk_cooldown
        if state.steps - state.last_walk_step < cooldown:
            return None

        max_distance = math.inf if stuck else config.max_walk_distance
        current = self.station_by_id[state.current_station_id]
        complex_id = self.complexes.complex_of(state.current_station_id)

        best: Move | None = None
        for station in self.stations:
            if self.complexes.complex_of(station.station_id) == complex_id:
                continue
            if not self.schedule.has_departures(station.station_id):
                continue

            walk_distance = planar_distance(current, station)
            if walk_distance > max_distance:
                continue

            score = (
                distance_before - planar_distance(station, target)
            ) * config.distance_weight - walk_distance * config.walk_penalty_weight

            if best is None or score > best.score:
                best = Move(
                    kind=StepKind.WALK,
                    next_station_id=station.station_id,
                    departure_time=state.current_time,
                    arrival_time=state.current_time + walk_seconds(walk_distance, config),
                    score=score,
                )
        return best
