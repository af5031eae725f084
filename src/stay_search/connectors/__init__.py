"""Listing and occupancy sources."""

from .base import ListingRepository, OccupancyOracle
from .memory import MemoryOccupancyOracle, MemoryRepository
from .postgrest import PostgrestOccupancyOracle, PostgrestRepository

__all__ = [
    "ListingRepository",
    "OccupancyOracle",
    "MemoryRepository",
    "MemoryOccupancyOracle",
    "PostgrestRepository",
    "PostgrestOccupancyOracle",
]
