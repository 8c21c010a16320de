"""End-to-end tests."""

import json
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path

import pytest

from transit_sweep import load_network, solve_feed, validate
from transit_sweep.api import solve_in_background
from transit_sweep.gtfs.models import SolverConfig, SolveState, StepKind
from transit_sweep.output.json import write_itinerary_json


def test_end_to_end_line(gtfs_line: Path) -> None:
    """Test the line fixture is solved from its first station."""
    result = solve_feed(str(gtfs_line), 0)

    assert result.state is SolveState.DONE
    assert result.start_station_id == "S1"
    assert [s.kind for s in result.itinerary] == [StepKind.RIDE, StepKind.WAIT, StepKind.RIDE]
    assert result.itinerary[-1].end_time == 270


def test_end_to_end_hub(gtfs_hub: Path) -> None:
    """Test a ride, a platform transfer and a ride cover the three complexes."""
    result = solve_feed(str(gtfs_hub), 8 * 3600)

    assert result.state is SolveState.DONE
    assert result.start_station_id == "A1"
    assert result.total_complexes == 3

    summary = [
        (s.kind, s.from_station, s.to_station, s.start_time, s.end_time) for s in result.itinerary
    ]
    assert summary == [
        (StepKind.WAIT, "A1", "A1", 28800, 29400),
        (StepKind.RIDE, "A1", "HA", 29400, 29700),
        (StepKind.TRANSFER, "HA", "HB", 29700, 29820),
        (StepKind.WAIT, "HB", "HB", 29820, 32400),
        (StepKind.RIDE, "HB", "B1", 32400, 32820),
    ]
    assert result.total_time == "1h 7m 0s"
    assert result.visited_station_ids == frozenset({"HUB", "HA", "HB", "A1", "B1", "X1"})


def test_end_to_end_service_filter(gtfs_hub: Path) -> None:
    """Test excluding the weekend trip pushes the last ride to the next day."""
    config = SolverConfig(service_ids=frozenset({"Weekday"}))
    result = solve_feed(str(gtfs_hub), 8 * 3600, config)

    last = result.itinerary[-1]
    assert (last.kind, last.to_station) == (StepKind.RIDE, "B1")
    assert (last.start_time, last.end_time) == (29100 + 86400, 29520 + 86400)
    assert result.state is SolveState.DONE


def test_end_to_end_invalid_feed(gtfs_edgecases: Path) -> None:
    """Test an invalid feed is refused before solving."""
    with pytest.raises(ValueError, match="validation failed"):
        solve_feed(str(gtfs_edgecases), 0)


def test_network_cache(gtfs_hub: Path) -> None:
    """Test the same feed and options reuse one network."""
    first = load_network(str(gtfs_hub))
    second = load_network(str(gtfs_hub))
    filtered = load_network(str(gtfs_hub), SolverConfig(service_ids=frozenset({"Weekday"})))
    uncached = load_network(str(gtfs_hub), use_cache=False)

    assert first is second
    assert filtered is not first
    assert uncached is not first


def test_validate_api(gtfs_hub: Path, gtfs_edgecases: Path) -> None:
    """Test the validate entry point."""
    assert validate(str(gtfs_hub)).valid
    assert not validate(str(gtfs_edgecases)).valid


def test_write_itinerary_json(gtfs_hub: Path, tmp_output: Path) -> None:
    """Test itinerary.json structure."""
    result = solve_feed(str(gtfs_hub), 8 * 3600)
    path = write_itinerary_json(tmp_output, result, include_trace=True)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    assert data["state"] == "DONE"
    assert data["stations_visited_count"] == 3
    assert data["visited_station_ids"] == sorted(data["visited_station_ids"])
    assert data["start_station_id"] == "A1"
    assert data["stop_reason"] is None
    assert [step["step_type"] for step in data["itinerary"]] == [
        "WAIT",
        "RIDE",
        "TRANSFER",
        "WAIT",
        "RIDE",
    ]
    assert data["itinerary"][1]["route_id"] == "A"
    assert data["itinerary"][2]["route_id"] is None
    assert data["trace"][0]["code"] == "start"


def test_json_output_is_deterministic(gtfs_hub: Path, tmp_output: Path) -> None:
    """Test JSON output is stable across writes."""
    result = solve_feed(str(gtfs_hub), 8 * 3600)

    path = write_itinerary_json(tmp_output, result)
    content1 = path.read_text(encoding="utf-8")
    path = write_itinerary_json(tmp_output, result)
    content2 = path.read_text(encoding="utf-8")

    assert content1 == content2
    assert "trace" not in json.loads(content1)


def test_solve_in_background(gtfs_line: Path) -> None:
    """Test a solve runs in a worker process."""
    with ProcessPoolExecutor(max_workers=1) as executor:
        future = solve_in_background(str(gtfs_line), 0, executor=executor)
        result = future.result(timeout=60)

    assert result.state is SolveState.DONE
    assert result.stations_visited_count == 3


def test_solve_in_background_own_pool(gtfs_line: Path) -> None:
    """Test a one-off worker pool is created when none is given."""
    result = solve_in_background(str(gtfs_line), 0).result(timeout=60)

    assert result.state is SolveState.DONE
