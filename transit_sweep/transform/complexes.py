"""Station complex grouping with union-find."""

import logging
from collections.abc import Iterable

from transit_sweep.gtfs.models import Station, Transfer

logger = logging.getLogger(__name__)


class StationComplexResolver:
    """Group stations sharing a parent station or a transfer into complexes.

    Station ids are mapped to dense indices once; the partition is an
    index-addressed parent array. The complex id is the station id of the
    set's root.
    """

    def __init__(self, stations: list[Station], transfers: Iterable[Transfer] = ()) -> None:
        self.stations = stations
        self._index: dict[str, int] = {}
        self._ids: list[str] = []
        self._parent: list[int] = []

        for station in stations:
            self._add(station.station_id)

        parent_links = 0
        for station in stations:
            if station.parent_id and station.parent_id != station.station_id:
                # Parent may not be a loaded stop; it still anchors the group
                self._add(station.parent_id)
                self.union(station.station_id, station.parent_id)
                parent_links += 1

        transfer_links = 0
        for transfer in transfers:
            if transfer.from_stop_id in self._index and transfer.to_stop_id in self._index:
                self.union(transfer.from_stop_id, transfer.to_stop_id)
                transfer_links += 1
            else:
                logger.warning(
                    f"Transfer references unknown stops: "
                    f"{transfer.from_stop_id} -> {transfer.to_stop_id}"
                )

        self.complex_map: dict[str, str] = {
            station.station_id: self.find(station.station_id) for station in stations
        }
        self.members: dict[str, list[Station]] = {}
        for station in stations:
            complex_id = self.complex_map[station.station_id]
            if complex_id not in self.members:
                self.members[complex_id] = []
            self.members[complex_id].append(station)

        logger.info(
            f"Resolved {len(stations)} stations into {len(self.members)} complexes "
            f"({parent_links} parent links, {transfer_links} transfers)"
        )

    def _add(self, station_id: str) -> int:
        if station_id not in self._index:
            self._index[station_id] = len(self._ids)
            self._ids.append(station_id)
            self._parent.append(len(self._parent))
        return self._index[station_id]

    def _find_index(self, i: int) -> int:
        root = i
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression
        while self._parent[i] != root:
            next_i = self._parent[i]
            self._parent[i] = root
            i = next_i
        return root

    def find(self, station_id: str) -> str:
        """Return the canonical complex id of a known station id."""
        return self._ids[self._find_index(self._index[station_id])]

    def union(self, a: str, b: str) -> None:
        """Attach the root of ``a`` under the root of ``b``."""
        root_a = self._find_index(self._index[a])
        root_b = self._find_index(self._index[b])
        if root_a != root_b:
            self._parent[root_a] = root_b

    def complex_of(self, station_id: str) -> str:
        """Complex id of a station."""
        return self.complex_map[station_id]

    def siblings(self, complex_id: str) -> list[Station]:
        """Member stations of a complex, in station order."""
        return self.members.get(complex_id, [])

    @property
    def complex_ids(self) -> set[str]:
        """All distinct complex ids."""
        return set(self.members)

    def __len__(self) -> int:
        return len(self.members)
