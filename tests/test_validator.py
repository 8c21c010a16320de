"""Tests for GTFS validator."""

from pathlib import Path

from transit_sweep.gtfs.reader import GTFSReader
from transit_sweep.gtfs.validator import GTFSValidator


def _validate(path: Path):
    reader = GTFSReader(str(path))
    reader.read_all()
    return GTFSValidator(reader).validate()


def test_validator_valid_data(gtfs_hub: Path) -> None:
    """Test validator passes on valid data."""
    report = _validate(gtfs_hub)

    assert report.valid
    assert len(report.errors) == 0
    assert report.stats["stations"] == 6
    assert report.stats["trips"] == 5
    assert report.stats["transfers"] == 1


def test_validator_invalid_coordinates(gtfs_edgecases: Path) -> None:
    """Test validator catches invalid coordinates."""
    report = _validate(gtfs_edgecases)

    assert not report.valid
    assert any("latitude" in err.lower() for err in report.errors)
    assert any("longitude" in err.lower() for err in report.errors)


def test_validator_bad_references(gtfs_edgecases: Path) -> None:
    """Test validator catches stop times pointing at unknown trips and stops."""
    report = _validate(gtfs_edgecases)

    assert any("non-existent trip T_ghost" in err for err in report.errors)
    assert any("non-existent stop MISSING" in err for err in report.errors)


def test_validator_warnings(gtfs_edgecases: Path) -> None:
    """Test validator generates warnings for recoverable problems."""
    report = _validate(gtfs_edgecases)

    assert any("unknown parent GHOST" in w for w in report.warnings)
    assert any("non-increasing times" in w for w in report.warnings)
    assert any("single stop" in w for w in report.warnings)
    assert any("NOWHERE" in w for w in report.warnings)


def test_validator_no_departures(tmp_path: Path, gtfs_line: Path) -> None:
    """Test a feed where no trip has two stops is rejected."""
    (tmp_path / "stops.txt").write_text((gtfs_line / "stops.txt").read_text())
    (tmp_path / "trips.txt").write_text("route_id,service_id,trip_id\nL,Weekday,T1\n")
    (tmp_path / "stop_times.txt").write_text(
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
        "T1,08:00:00,08:00:00,S1,1\n"
    )

    report = _validate(tmp_path)

    assert not report.valid
    assert any("nothing to depart from" in err for err in report.errors)
