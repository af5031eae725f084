"""Resolve which candidate listings are unavailable for a date range."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Iterable

from ..connectors.base import OccupancyOracle
from ..errors import OccupancyLookupError
from ..models import BlockedDay, BusyInterval, DateRange

logger = logging.getLogger(__name__)


@dataclass
class OccupancyResolution:
    """Outcome of an availability check."""

    unavailable: frozenset[str] = field(default_factory=frozenset)
    applied: bool = False
    failed: bool = False
    error: str | None = None


def unavailable_ids(
    date_range: DateRange,
    intervals: Iterable[BusyInterval],
    blocked: Iterable[BlockedDay],
) -> set[str]:
    """
    Union of listings with an overlapping busy interval or a blocked day in range.
    Rows are re-checked here so an oracle returning a superset can't over-exclude.
    """
    busy = {i.listing_id for i in intervals if date_range.overlaps(i.start, i.end)}
    days = {b.listing_id for b in blocked if date_range.contains(b.date)}
    return busy | days


class OccupancyResolver:
    """
    Cross-references confirmed reservations and blocked days.
    Both reads run concurrently and are bounded by `timeout`; any failure
    degrades to "no exclusions" (fail-open).
    """

    def __init__(
        self,
        oracle: OccupancyOracle,
        confirmed_status: str = "confirmed",
        timeout: float | None = 5.0,
    ) -> None:
        self.oracle = oracle
        self.confirmed_status = confirmed_status
        self.timeout = timeout

    def resolve_unavailable(
        self,
        candidate_ids: Iterable[str],
        date_range: DateRange | None,
    ) -> OccupancyResolution:
        """Return the subset of `candidate_ids` that cannot be booked for `date_range`."""
        if date_range is None:
            return OccupancyResolution()

        candidates = set(candidate_ids)
        try:
            intervals, blocked = self._lookup(date_range)
        except OccupancyLookupError as e:
            logger.warning("Availability check skipped for %s..%s: %s", date_range.start, date_range.end, e)
            return OccupancyResolution(failed=True, error=str(e))

        unavailable = unavailable_ids(date_range, intervals, blocked) & candidates
        logger.debug(
            "Occupancy %s..%s: %d reservation(s), %d blocked day(s), %d unavailable",
            date_range.start,
            date_range.end,
            len(intervals),
            len(blocked),
            len(unavailable),
        )
        return OccupancyResolution(unavailable=frozenset(unavailable), applied=True)

    def _lookup(self, date_range: DateRange) -> tuple[list[BusyInterval], list[BlockedDay]]:
        executor = ThreadPoolExecutor(max_workers=2)
        try:
            future_busy = executor.submit(
                self.oracle.find_busy_intervals, self.confirmed_status, date_range
            )
            future_blocked = executor.submit(self.oracle.find_blocked_days, date_range)
            _, pending = wait([future_busy, future_blocked], timeout=self.timeout)
            if pending:
                raise OccupancyLookupError(f"Occupancy lookup timed out after {self.timeout}s")
            try:
                return future_busy.result(), future_blocked.result()
            except OccupancyLookupError:
                raise
            except Exception as e:
                raise OccupancyLookupError(f"{type(e).__name__}: {e!s}") from e
        finally:
            # Don't block on a hung lookup
            executor.shutdown(wait=False, cancel_futures=True)
