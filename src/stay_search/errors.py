"""Exception types raised by the search pipeline."""

from __future__ import annotations


class StaySearchError(Exception):
    """Base class for search errors."""


class RepositoryError(StaySearchError):
    """The listing repository could not be queried. No partial results exist."""


class OccupancyLookupError(StaySearchError):
    """Reservations or blocked days could not be read for the requested range."""


class InvalidDateRange(StaySearchError, ValueError):
    """A date range whose start falls after its end."""

    def __init__(self, start, end) -> None:
        super().__init__(f"Invalid date range: {start} is after {end}")
        self.start = start
        self.end = end
