"""Base interfaces for listing and occupancy sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import (
        BlockedDay,
        BusyInterval,
        DateRange,
        Domain,
        ListingCandidate,
        QueryDescriptor,
    )


class ListingRepository(ABC):
    """
    Returns candidate listings matching a compiled QueryDescriptor.
    Implementations: in-memory, PostgREST, DuckDB.
    """

    @abstractmethod
    def find(self, domain: Domain, descriptor: QueryDescriptor) -> list[ListingCandidate]:
        """
        Fetch listings of `domain` satisfying every predicate in `descriptor`.
        Order must be stable for identical input. Raises RepositoryError.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this data source."""
        ...


class OccupancyOracle(ABC):
    """Reads reservations and manually blocked days. Raises OccupancyLookupError."""

    @abstractmethod
    def find_busy_intervals(self, status: str, overlapping: DateRange) -> list[BusyInterval]:
        """Reservations with the given status whose [start, end] overlaps the range."""
        ...

    @abstractmethod
    def find_blocked_days(self, within: DateRange) -> list[BlockedDay]:
        """Blocked days falling inside the range (inclusive)."""
        ...
