"""Availability-aware listing search."""

from __future__ import annotations

import logging

from ..config import get_filter_defaults, get_search_settings, load_config
from ..connectors.base import ListingRepository, OccupancyOracle
from ..models import Domain, FilterDefaults, FilterSet, ResultSet, SearchSettings
from .assembler import assemble
from .compiler import compile_filters
from .occupancy import OccupancyResolution, OccupancyResolver

logger = logging.getLogger(__name__)


class SearchEngine:
    """
    Turns a FilterSet into the ordered set of matching, available listings.

    Pipeline: compile predicates -> repository.find -> occupancy exclusion
    (date range given, properties only) -> season matching -> assemble.
    Stateless between calls; every search reads a fresh snapshot.
    """

    def __init__(
        self,
        repository: ListingRepository,
        oracle: OccupancyOracle,
        defaults: FilterDefaults | None = None,
        settings: SearchSettings | None = None,
        config: dict | None = None,
    ) -> None:
        if config is None and (defaults is None or settings is None):
            config = load_config()
        self.repository = repository
        self.oracle = oracle
        self.defaults = defaults or get_filter_defaults(config)
        self.settings = settings or get_search_settings(config)
        self.resolver = OccupancyResolver(
            oracle,
            confirmed_status=self.settings.confirmed_status,
            timeout=self.settings.oracle_timeout_seconds,
        )

    def search(self, filters: FilterSet, domain: Domain | str | None = None) -> ResultSet:
        """
        Run the full pipeline. Read-only and idempotent.
        Raises RepositoryError if listings can't be fetched; occupancy failures
        degrade to no availability filtering (see ResultSet.availability_check_failed).
        """
        domain = Domain(domain) if domain is not None else filters.domain
        descriptor = compile_filters(
            filters,
            domain,
            defaults=self.defaults,
            day_rate_multiplier=self.settings.day_rate_multiplier,
        )
        candidates = self.repository.find(domain, descriptor)
        logger.debug("%s returned %d %s candidate(s)", self.repository.source_name, len(candidates), domain.value)

        if domain is Domain.PROPERTIES:
            occupancy = self.resolver.resolve_unavailable(
                [c.id for c in candidates], filters.date_range
            )
        else:
            occupancy = OccupancyResolution()

        seasons = filters.seasons if domain is Domain.PROPERTIES else ()
        result = assemble(candidates, occupancy, seasons, domain)
        logger.debug(
            "Search %s: %d candidate(s), %d unavailable, %d off-season, %d result(s)",
            domain.value,
            result.candidates_count,
            result.excluded_unavailable,
            result.excluded_by_season,
            len(result),
        )
        return result
