"""GTFS data reader and normalizer."""

import csv
import logging
from pathlib import Path

from transit_sweep.gtfs.models import Station, StopTime, Transfer, Trip, TripStop

logger = logging.getLogger(__name__)


class GTFSReader:
    """Read and normalize the GTFS files the solver needs from a directory."""

    def __init__(self, gtfs_path: str) -> None:
        """Initialize reader with GTFS directory path."""
        self.gtfs_path = Path(gtfs_path)
        if not self.gtfs_path.is_dir():
            raise ValueError(f"GTFS path not found or not a directory: {gtfs_path}")

        # Data storage
        self.stations: list[Station] = []
        self.trips: list[Trip] = []
        self.stop_times: list[StopTime] = []
        self.transfers: list[Transfer] = []

        # trips.txt rows before stop times are attached
        self._trip_headers: list[tuple[str, str, str]] = []

    def read_all(self) -> None:
        """Read all GTFS files."""
        logger.info(f"Reading GTFS data from {self.gtfs_path}")
        self.read_stops()
        self.read_trips()
        self.read_stop_times()
        self.read_transfers()
        self.trips = self.build_trips()
        logger.info(
            f"Loaded {len(self.stations)} stations, {len(self.trips)} trips, "
            f"{len(self.stop_times)} stop_times, {len(self.transfers)} transfers"
        )

    def read_stops(self) -> None:
        """Read stops.txt, keeping rows with a name and a numeric latitude."""
        file_path = self.gtfs_path / "stops.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        stations_raw: list[Station] = []
        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                stop_id = row["stop_id"].strip()
                name = (row.get("stop_name") or "").strip()
                try:
                    lat = float(row["stop_lat"])
                    lon = float(row["stop_lon"])
                except (TypeError, ValueError):
                    logger.warning(f"Stop {stop_id} has no usable coordinates, skipping")
                    continue
                if not name:
                    logger.warning(f"Stop {stop_id} has empty name, skipping")
                    continue

                parent_id = (row.get("parent_station") or "").strip() or None
                stations_raw.append(
                    Station(station_id=stop_id, name=name, lat=lat, lon=lon, parent_id=parent_id)
                )

        # Sort by stop_id for a stable station order
        stations_raw.sort(key=lambda s: s.station_id)
        self.stations = stations_raw

    def read_trips(self) -> None:
        """Read trips.txt."""
        file_path = self.gtfs_path / "trips.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                self._trip_headers.append(
                    (row["route_id"], row["trip_id"], row.get("service_id", ""))
                )

        # Sort by trip_id for a stable trip order
        self._trip_headers.sort(key=lambda x: x[1])

    def read_stop_times(self) -> None:
        """Read stop_times.txt and normalize times."""
        file_path = self.gtfs_path / "stop_times.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        stop_times_raw: list[StopTime] = []
        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                arrival_time = self._parse_time(row["arrival_time"])
                departure_time = self._parse_time(row["departure_time"])

                stop_time = StopTime(
                    trip_id=row["trip_id"],
                    stop_id=row["stop_id"].strip(),
                    arrival_time=arrival_time,
                    departure_time=departure_time,
                    stop_sequence=int(row["stop_sequence"]),
                )
                stop_times_raw.append(stop_time)

        # Sort by trip_id, then stop_sequence for normalization
        stop_times_raw.sort(key=lambda st: (st.trip_id, st.stop_sequence))
        self.stop_times = stop_times_raw

    def read_transfers(self) -> None:
        """Read transfers.txt if present."""
        file_path = self.gtfs_path / "transfers.txt"
        if not file_path.exists():
            logger.info("transfers.txt not found, no explicit transfers")
            return

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                transfer = Transfer(
                    from_stop_id=row["from_stop_id"].strip(),
                    to_stop_id=row["to_stop_id"].strip(),
                    transfer_type=int(row.get("transfer_type") or "0"),
                )
                self.transfers.append(transfer)

    def build_trips(self) -> list[Trip]:
        """Attach ordered stop times to each trip header."""
        stops_by_trip: dict[str, list[TripStop]] = {}
        for st in self.stop_times:
            if st.trip_id not in stops_by_trip:
                stops_by_trip[st.trip_id] = []
            stops_by_trip[st.trip_id].append(
                TripStop(
                    station_id=st.stop_id,
                    arrival_time=st.arrival_time,
                    departure_time=st.departure_time,
                )
            )

        trips: list[Trip] = []
        for route_id, trip_id, service_id in self._trip_headers:
            if trip_id not in stops_by_trip:
                logger.warning(f"Trip {trip_id} has no stop times, skipping")
                continue
            trips.append(
                Trip(
                    route_id=route_id,
                    trip_id=trip_id,
                    service_id=service_id,
                    stop_times=tuple(stops_by_trip[trip_id]),
                )
            )
        return trips

    @staticmethod
    def _parse_time(time_str: str) -> int:
        """Parse HH:MM:SS to seconds since midnight, supporting >24h."""
        parts = time_str.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"Invalid time format: {time_str}")

        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2])

        return hours * 3600 + minutes * 60 + seconds
