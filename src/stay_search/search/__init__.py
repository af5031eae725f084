"""Availability & filter resolution engine."""

from .assembler import assemble
from .compiler import compile_filters
from .engine import SearchEngine
from .occupancy import OccupancyResolution, OccupancyResolver, unavailable_ids
from .session import Failed, Idle, SearchSession, Searching, Settled

__all__ = [
    "SearchEngine",
    "SearchSession",
    "compile_filters",
    "assemble",
    "OccupancyResolver",
    "OccupancyResolution",
    "unavailable_ids",
    "Idle",
    "Searching",
    "Settled",
    "Failed",
]
