"""GTFS data validator."""

import logging

from transit_sweep.gtfs.models import ValidationReport
from transit_sweep.gtfs.reader import GTFSReader

logger = logging.getLogger(__name__)


class GTFSValidator:
    """Validate GTFS data for consistency before solving."""

    def __init__(self, reader: GTFSReader) -> None:
        """Initialize validator with GTFS reader."""
        self.reader = reader
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate(self) -> ValidationReport:
        """Run all validation checks."""
        logger.info("Validating GTFS data")

        self._validate_stations()
        self._validate_trips()
        self._validate_stop_times()
        self._validate_transfers()

        valid = len(self.errors) == 0

        stats = {
            "stations": len(self.reader.stations),
            "trips": len(self.reader.trips),
            "stop_times": len(self.reader.stop_times),
            "transfers": len(self.reader.transfers),
        }

        report = ValidationReport(
            valid=valid,
            errors=self.errors.copy(),
            warnings=self.warnings.copy(),
            stats=stats,
        )

        if not valid:
            logger.error(f"Validation failed with {len(self.errors)} errors")
        elif self.warnings:
            logger.warning(f"Validation passed with {len(self.warnings)} warnings")
        else:
            logger.info("Validation passed")

        return report

    def _validate_stations(self) -> None:
        """Validate stations exist, have valid coordinates and known parents."""
        if not self.reader.stations:
            self.errors.append("No stations found in GTFS data")
            return

        station_ids = {station.station_id for station in self.reader.stations}
        for station in self.reader.stations:
            if not (-90 <= station.lat <= 90):
                self.errors.append(
                    f"Station {station.station_id} has invalid latitude: {station.lat}"
                )
            if not (-180 <= station.lon <= 180):
                self.errors.append(
                    f"Station {station.station_id} has invalid longitude: {station.lon}"
                )
            if station.parent_id and station.parent_id not in station_ids:
                self.warnings.append(
                    f"Station {station.station_id} references unknown parent {station.parent_id}"
                )

    def _validate_trips(self) -> None:
        """Validate that at least one trip yields a departure."""
        if not any(len(trip.stop_times) > 1 for trip in self.reader.trips):
            self.errors.append("No trips with at least two stops, nothing to depart from")

        for trip in self.reader.trips:
            if len(trip.stop_times) == 1:
                self.warnings.append(f"Trip {trip.trip_id} has a single stop and no departures")

    def _validate_stop_times(self) -> None:
        """Validate stop_times reference valid stops/trips and run forward in time."""
        station_ids = {station.station_id for station in self.reader.stations}
        trip_ids = {trip.trip_id for trip in self.reader.trips}

        prev_trip_id = None
        prev_time = -1
        for st in self.reader.stop_times:
            if st.trip_id not in trip_ids:
                self.errors.append(f"Stop times reference non-existent trip {st.trip_id}")
                continue

            if st.stop_id not in station_ids:
                self.errors.append(
                    f"Stop time for trip {st.trip_id} references non-existent stop {st.stop_id}"
                )

            if st.trip_id != prev_trip_id:
                prev_trip_id = st.trip_id
                prev_time = -1

            if st.arrival_time < prev_time:
                self.warnings.append(
                    f"Trip {st.trip_id} has non-increasing times at stop {st.stop_id}: "
                    f"{prev_time} -> {st.arrival_time}"
                )
            if st.departure_time < st.arrival_time:
                self.warnings.append(
                    f"Trip {st.trip_id} departs stop {st.stop_id} before arriving"
                )

            prev_time = st.departure_time

    def _validate_transfers(self) -> None:
        """Warn about transfers that cannot join complexes."""
        station_ids = {station.station_id for station in self.reader.stations}

        for transfer in self.reader.transfers:
            if transfer.from_stop_id not in station_ids:
                self.warnings.append(
                    f"Transfer references non-existent from_stop {transfer.from_stop_id}"
                )
            if transfer.to_stop_id not in station_ids:
                self.warnings.append(
                    f"Transfer references non-existent to_stop {transfer.to_stop_id}"
                )
