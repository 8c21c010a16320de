"""Transit Sweep - Greedy itineraries that visit every station complex of a timetable."""

from transit_sweep.api import build_network, load_network, solve, solve_feed, validate
from transit_sweep.version import OUTPUT_SCHEMA_VERSION, VERSION

__version__ = VERSION
__all__ = [
    "OUTPUT_SCHEMA_VERSION",
    "VERSION",
    "build_network",
    "load_network",
    "solve",
    "solve_feed",
    "validate",
]
