"""In-memory listing and occupancy sources (seed files, tests)."""

from __future__ import annotations

from typing import Any

from ..filters import filter_candidates
from ..models import (
    BlockedDay,
    BusyInterval,
    DateRange,
    Domain,
    ListingCandidate,
    QueryDescriptor,
    parse_date,
)
from .base import ListingRepository, OccupancyOracle


class MemoryRepository(ListingRepository):
    """Evaluates descriptors against listings held in memory, in insertion order."""

    def __init__(self, listings: list[ListingCandidate] | None = None) -> None:
        self.listings: list[ListingCandidate] = list(listings or [])

    @classmethod
    def from_seed(cls, data: dict[str, Any]) -> MemoryRepository:
        listings = [ListingCandidate.from_row(r, Domain.PROPERTIES) for r in data.get("properties", [])]
        listings += [ListingCandidate.from_row(r, Domain.EXPERIENCES) for r in data.get("experiences", [])]
        return cls(listings)

    @property
    def source_name(self) -> str:
        return "memory"

    def find(self, domain: Domain, descriptor: QueryDescriptor) -> list[ListingCandidate]:
        return filter_candidates(self.listings, descriptor)


class MemoryOccupancyOracle(OccupancyOracle):
    """Reservations are (listing_id, start, end, status) tuples."""

    def __init__(
        self,
        reservations: list[tuple[str, Any, Any, str]] | None = None,
        blocked: list[BlockedDay] | None = None,
    ) -> None:
        self.reservations = [
            (str(lid), parse_date(s), parse_date(e), status) for lid, s, e, status in (reservations or [])
        ]
        self.blocked = list(blocked or [])

    @classmethod
    def from_seed(cls, data: dict[str, Any]) -> MemoryOccupancyOracle:
        reservations = [
            (b["property_id"], b["start_date"], b["end_date"], b.get("status", ""))
            for b in data.get("bookings", [])
        ]
        blocked = [
            BlockedDay(str(d["property_id"]), parse_date(d["date"]))
            for d in data.get("blocked_dates", [])
        ]
        return cls(reservations, blocked)

    def find_busy_intervals(self, status: str, overlapping: DateRange) -> list[BusyInterval]:
        return [
            BusyInterval(lid, start, end)
            for lid, start, end, st in self.reservations
            if st == status and overlapping.overlaps(start, end)
        ]

    def find_blocked_days(self, within: DateRange) -> list[BlockedDay]:
        return [b for b in self.blocked if within.contains(b.date)]
