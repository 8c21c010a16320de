"""Per-station departure index built from trips."""

import logging
from bisect import bisect_left
from collections.abc import Iterable

from transit_sweep.gtfs.models import Departure, Trip

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def effective_departure_time(base_time: int, current_time: int) -> int:
    """Shift a departure by whole days until it is not before ``current_time``."""
    if base_time >= current_time:
        return base_time
    days = -(-(current_time - base_time) // SECONDS_PER_DAY)
    return base_time + days * SECONDS_PER_DAY


class ScheduleIndex:
    """Sorted one-hop departures per origin station.

    Stations are keyed in order of first appearance in the trip list; the
    first key is the solver's default starting point.
    """

    def __init__(
        self,
        trips: Iterable[Trip],
        wrap_lookahead: int = 10,
        service_ids: frozenset[str] | None = None,
    ) -> None:
        self.wrap_lookahead = wrap_lookahead
        self._departures: dict[str, list[Departure]] = {}
        self._times: dict[str, list[int]] = {}

        skipped = 0
        for trip in trips:
            if service_ids is not None and trip.service_id not in service_ids:
                skipped += 1
                continue
            for current, following in zip(trip.stop_times, trip.stop_times[1:]):
                if current.station_id not in self._departures:
                    self._departures[current.station_id] = []
                self._departures[current.station_id].append(
                    Departure(
                        trip_id=trip.trip_id,
                        route_id=trip.route_id,
                        departure_time=current.departure_time,
                        next_station_id=following.station_id,
                        arrival_time=following.arrival_time,
                    )
                )

        # list.sort is stable, ties keep trip order
        for station_id, departures in self._departures.items():
            departures.sort(key=lambda d: d.departure_time)
            self._times[station_id] = [d.departure_time for d in departures]

        if skipped:
            logger.info(f"Skipped {skipped} trips outside the selected services")
        logger.info(
            f"Indexed {self.total_departures} departures from {len(self._departures)} stations"
        )

    @property
    def total_departures(self) -> int:
        return sum(len(departures) for departures in self._departures.values())

    @property
    def station_ids(self) -> list[str]:
        return list(self._departures)

    def first_station(self) -> str | None:
        """First origin station in index order, or None for an empty index."""
        return next(iter(self._departures), None)

    def departures(self, station_id: str) -> list[Departure]:
        return self._departures.get(station_id, [])

    def has_departures(self, station_id: str) -> bool:
        return bool(self._departures.get(station_id))

    def reachable(self, station_id: str, time: int) -> list[tuple[Departure, int]]:
        """Departures catchable at or after ``time`` with their effective times.

        Same-day departures are returned as-is. When none remain, the service
        day is treated as repeating and the first ``wrap_lookahead`` departures
        are shifted forward by whole days.
        """
        departures = self._departures.get(station_id)
        if not departures:
            return []

        start = bisect_left(self._times[station_id], time)
        if start < len(departures):
            return [(d, d.departure_time) for d in departures[start:]]

        return [
            (d, effective_departure_time(d.departure_time, time))
            for d in departures[: self.wrap_lookahead]
        ]

    def __contains__(self, station_id: object) -> bool:
        return station_id in self._departures

    def __len__(self) -> int:
        return len(self._departures)
