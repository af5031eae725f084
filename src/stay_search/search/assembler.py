"""Combine repository candidates, occupancy exclusions and season matching."""

from __future__ import annotations

from typing import Iterable

from ..filters import matches_seasons
from ..models import Domain, ListingCandidate, ResultSet
from .occupancy import OccupancyResolution


def assemble(
    candidates: list[ListingCandidate],
    occupancy: OccupancyResolution,
    season_tags: Iterable[str],
    domain: Domain,
) -> ResultSet:
    """
    Keep candidates that are available and match the requested seasons.
    Repository order is preserved; nothing is re-sorted.
    """
    seasons = tuple(season_tags)
    kept: list[ListingCandidate] = []
    excluded_unavailable = 0
    excluded_by_season = 0
    for c in candidates:
        if c.id in occupancy.unavailable:
            excluded_unavailable += 1
            continue
        if not matches_seasons(c, seasons):
            excluded_by_season += 1
            continue
        kept.append(c)

    return ResultSet(
        listings=kept,
        domain=domain,
        availability_filter_applied=occupancy.applied,
        availability_check_failed=occupancy.failed,
        candidates_count=len(candidates),
        excluded_unavailable=excluded_unavailable,
        excluded_by_season=excluded_by_season,
    )
