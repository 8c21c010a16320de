"""Pytest configuration and fixtures."""

import shutil
from pathlib import Path

import pytest

from transit_sweep.api import clear_network_cache
from transit_sweep.gtfs.models import Station, Transfer, Trip, TripStop


def make_trip(
    route_id: str, trip_id: str, stops: list[tuple[str, int, int]], service_id: str = "Weekday"
) -> Trip:
    """Trip from (station_id, arrival, departure) tuples."""
    return Trip(
        route_id=route_id,
        trip_id=trip_id,
        service_id=service_id,
        stop_times=tuple(TripStop(s, arrival, departure) for s, arrival, departure in stops),
    )


def generate_trips(
    route_id: str, station_ids: list[str], interval_minutes: int, start: int, end: int
) -> list[Trip]:
    """Evenly spaced trips, two minutes between stops and a 30 second dwell."""
    trips = []
    counter = 1
    for t in range(start, end, interval_minutes * 60):
        trips.append(
            make_trip(
                route_id,
                f"{route_id}-{counter}",
                [(s, t + i * 120, t + i * 120 + 30) for i, s in enumerate(station_ids)],
            )
        )
        counter += 1
    return trips


@pytest.fixture(autouse=True)
def _fresh_network_cache() -> None:
    clear_network_cache()


@pytest.fixture
def gtfs_line() -> Path:
    """Path to the three-station line fixture."""
    return Path(__file__).parent / "fixtures" / "gtfs_line"


@pytest.fixture
def gtfs_hub() -> Path:
    """Path to the hub fixture with parent stations and a transfer."""
    return Path(__file__).parent / "fixtures" / "gtfs_hub"


@pytest.fixture
def gtfs_edgecases() -> Path:
    """Path to edge cases GTFS fixture."""
    return Path(__file__).parent / "fixtures" / "gtfs_edgecases"


@pytest.fixture
def tmp_output(tmp_path: Path) -> Path:
    """Temporary output directory."""
    output_dir = tmp_path / "sweep_output"
    output_dir.mkdir()
    yield output_dir
    # Cleanup
    if output_dir.exists():
        shutil.rmtree(output_dir)


@pytest.fixture
def line_records() -> tuple[list[Station], list[Trip]]:
    """S1 -> S2 -> S3 with a single trip."""
    stations = [
        Station("S1", "First Street", 40.0, -73.0),
        Station("S2", "Second Street", 40.1, -73.0),
        Station("S3", "Third Street", 40.2, -73.0),
    ]
    trips = [make_trip("L", "T1", [("S1", 0, 0), ("S2", 120, 150), ("S3", 270, 270)])]
    return stations, trips


@pytest.fixture
def subway_records() -> tuple[list[Station], list[Trip], list[Transfer]]:
    """Small three-line subway with a Times Square complex joined by transfers."""
    stations = [
        Station("101", "Van Cortlandt Park-242 St", 40.889248, -73.898583),
        Station("103", "238 St", 40.884667, -73.90087),
        Station("104", "231 St", 40.878856, -73.904834),
        Station("120", "96 St", 40.793919, -73.972323),
        Station("127", "Times Sq-42 St", 40.75529, -73.987495),
        Station("128", "34 St-Penn Station", 40.750373, -73.991057),
        Station("132", "14 St", 40.737826, -74.000201),
        Station("137", "Chambers St", 40.715478, -74.009266),
        Station("142", "South Ferry", 40.702068, -74.013664),
        Station("A02", "Inwood-207 St", 40.868072, -73.919899),
        Station("A03", "Dyckman St", 40.865491, -73.927271),
        Station("A27", "42 St-Port Authority Bus Terminal", 40.757308, -73.989735),
        Station("A28", "34 St-Penn Station", 40.752287, -73.993391),
        Station("A32", "W 4 St-Wash Sq", 40.732338, -74.000495),
        Station("A55", "Howard Beach-JFK Airport", 40.660476, -73.830301),
        Station("A65", "Far Rockaway-Mott Av", 40.603995, -73.755405),
        Station("701", "Flushing-Main St", 40.7596, -73.83003),
        Station("702", "Mets-Willets Point", 40.754622, -73.845625),
        Station("723", "42 St-Bryant Pk", 40.754222, -73.984565),
        Station("724", "Times Sq-42 St", 40.755477, -73.987691),
        Station("726", "34 St-Hudson Yards", 40.755882, -74.00191),
    ]
    trips = (
        generate_trips(
            "1", ["101", "103", "104", "120", "127", "128", "132", "137", "142"], 10, 0, 86400
        )
        + generate_trips(
            "A", ["A02", "A03", "120", "A27", "A28", "A32", "A55", "A65"], 15, 0, 86400
        )
        + generate_trips("7", ["701", "702", "723", "724", "726"], 5, 0, 86400)
    )
    transfers = [Transfer("127", "A27", 2), Transfer("127", "724", 2)]
    return stations, trips, transfers
