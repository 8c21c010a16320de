"""JSON itinerary output."""

import json
import logging
from pathlib import Path
from typing import Any

from transit_sweep.gtfs.models import RouteStep, SolveResult
from transit_sweep.version import OUTPUT_SCHEMA_VERSION, VERSION

logger = logging.getLogger(__name__)


def step_to_dict(step: RouteStep) -> dict[str, Any]:
    """Plain dict for one itinerary step."""
    return {
        "step_type": step.kind.value,
        "from_station": step.from_station,
        "to_station": step.to_station,
        "route_id": step.route_id,
        "start_time": step.start_time,
        "end_time": step.end_time,
        "stations_covered": list(step.stations_covered),
        "description": step.description,
    }


def result_to_dict(result: SolveResult, include_trace: bool = False) -> dict[str, Any]:
    """Replay document for a finished run."""
    data: dict[str, Any] = {
        "schema_version": OUTPUT_SCHEMA_VERSION,
        "tool_version": VERSION,
        "state": result.state.value,
        "total_time": result.total_time,
        "total_seconds": result.total_seconds,
        "stations_visited_count": result.stations_visited_count,
        "total_complexes": result.total_complexes,
        "visited_station_ids": sorted(result.visited_station_ids),
        "start_time": result.start_time_iso,
        "start_station_id": result.start_station_id,
        "steps": result.steps,
        "stop_reason": result.stop_reason,
        "itinerary": [step_to_dict(step) for step in result.itinerary],
    }
    if include_trace:
        data["trace"] = [
            {"step": event.step, "code": event.code, "message": event.message, "data": event.data}
            for event in result.trace
        ]
    return data


def write_itinerary_json(
    output_path: Path, result: SolveResult, include_trace: bool = False
) -> Path:
    """Write itinerary.json into ``output_path`` and return the file path."""
    output_path.mkdir(parents=True, exist_ok=True)

    itinerary_path = output_path / "itinerary.json"
    with open(itinerary_path, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result, include_trace), f, indent=2, sort_keys=True)

    logger.info(f"Wrote {itinerary_path} ({len(result.itinerary)} steps)")
    return itinerary_path
