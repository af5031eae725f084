"""Tests for the end-to-end search pipeline."""

import pytest

from stay_search.connectors import MemoryRepository
from stay_search.connectors.base import ListingRepository, OccupancyOracle
from stay_search.errors import InvalidDateRange, OccupancyLookupError, RepositoryError
from stay_search.filters import evaluate
from stay_search.models import Domain, FilterSet, ListingCandidate
from stay_search.search import SearchEngine, compile_filters

JULY_12_20 = {"check_in": "2024-07-12", "check_out": "2024-07-20"}


class DownOracle(OccupancyOracle):
    def find_busy_intervals(self, status, overlapping):
        raise OccupancyLookupError("bookings: HTTP 503")

    def find_blocked_days(self, within):
        raise OccupancyLookupError("blocked_dates: HTTP 503")


class DownRepository(ListingRepository):
    @property
    def source_name(self) -> str:
        return "down"

    def find(self, domain, descriptor):
        raise RepositoryError("properties: HTTP 500")


class TestConjunction:
    """Every result satisfies every backend predicate; every dropped candidate fails one."""

    @pytest.mark.parametrize(
        "filters, expected",
        [
            (FilterSet(price_per_day=50), ["A", "C", "D"]),
            (FilterSet(bedrooms=3), ["B", "C"]),
            (FilterSet(amenities=("Wifi", "Piscina")), ["A", "C"]),
            (FilterSet(query="piscina"), ["C"]),
            (FilterSet(location="valencia"), ["A", "D"]),
            (FilterSet(zone="costa", price_max=350), ["D"]),
            (FilterSet(price_per_month=1000), ["A", "D"]),
            (FilterSet(property_type="casa"), ["C"]),
            (FilterSet(bedrooms=2, amenities=("Wifi",), price_max=600), ["A", "C"]),
        ],
    )
    def test_backend_predicates(self, engine, repository, defaults, filters, expected) -> None:
        result = engine.search(filters)
        assert result.ids == expected

        descriptor = compile_filters(filters, Domain.PROPERTIES, defaults=defaults)
        kept = set(result.ids)
        for c in repository.listings:
            if c.domain is not Domain.PROPERTIES:
                continue
            passes = all(evaluate(p, c.attributes) for p in descriptor.predicates)
            assert passes == (c.id in kept)

    def test_loosened_day_rate(self, engine) -> None:
        # C: weekday 80, weekend 120; ceiling 50 -> 80 <= 100
        assert "C" in engine.search(FilterSet(price_per_day=50)).ids


class TestAvailability:
    def test_busy_interval_and_blocked_day_excluded(self, engine) -> None:
        result = engine.search(FilterSet(**JULY_12_20))
        assert result.ids == ["B", "C"]
        assert result.availability_filter_applied is True
        assert result.excluded_unavailable == 2

    def test_applied_flag_without_exclusions(self, engine) -> None:
        result = engine.search(FilterSet(check_in="2024-07-16", check_out="2024-07-17"))
        assert result.ids == ["A", "B", "C", "D"]
        assert result.availability_filter_applied is True
        assert result.excluded_unavailable == 0

    def test_single_bound_means_no_date_filter(self, engine) -> None:
        result = engine.search(FilterSet(check_in="2024-07-12"))
        assert result.ids == ["A", "B", "C", "D"]
        assert result.availability_filter_applied is False

    def test_invalid_range_rejected_before_search(self) -> None:
        with pytest.raises(InvalidDateRange):
            FilterSet(check_in="2024-07-20", check_out="2024-07-12")

    def test_fail_open(self, repository, defaults, settings) -> None:
        engine = SearchEngine(repository, DownOracle(), defaults=defaults, settings=settings)
        degraded = engine.search(FilterSet(seasons=("sep_jun", "oct_jun"), **JULY_12_20))
        undated = engine.search(FilterSet(seasons=("sep_jun", "oct_jun")))
        assert degraded.ids == undated.ids == ["A", "C"]
        assert degraded.availability_filter_applied is False
        assert degraded.availability_check_failed is True


class TestSeasons:
    def test_season_disjunction(self, engine) -> None:
        result = engine.search(FilterSet(seasons=("sep_jun", "oct_jun")))
        # B has only oct_may; D has no tags
        assert result.ids == ["A", "C"]
        assert result.excluded_by_season == 2

    def test_dates_and_seasons_are_conjunctive(self, engine) -> None:
        result = engine.search(FilterSet(seasons=("sep_jun", "oct_jun"), **JULY_12_20))
        assert result.ids == ["C"]
        assert result.availability_filter_applied is True


class TestResultAssembly:
    def test_no_filter_identity(self, engine, repository) -> None:
        result = engine.search(FilterSet())
        expected = [c.id for c in repository.listings if c.domain is Domain.PROPERTIES]
        assert result.ids == expected
        assert result.candidates_count == len(expected)

    def test_repository_order_preserved(self, repository, oracle, defaults, settings) -> None:
        shuffled = MemoryRepository(list(reversed(repository.listings)))
        engine = SearchEngine(shuffled, oracle, defaults=defaults, settings=settings)
        assert engine.search(FilterSet(**JULY_12_20)).ids == ["C", "B"]

    def test_deterministic(self, engine) -> None:
        fs = FilterSet(amenities=("Wifi",), seasons=("oct_jun", "sep_jun"), **JULY_12_20)
        assert engine.search(fs).ids == engine.search(fs).ids

    def test_listings_not_mutated(self, engine, repository) -> None:
        before = [dict(c.attributes) for c in repository.listings]
        engine.search(FilterSet(seasons=("oct_jun",), price_per_day=50, **JULY_12_20))
        assert [c.attributes for c in repository.listings] == before

    def test_repository_error_propagates(self, oracle, defaults, settings) -> None:
        engine = SearchEngine(DownRepository(), oracle, defaults=defaults, settings=settings)
        with pytest.raises(RepositoryError):
            engine.search(FilterSet())


class TestExperiences:
    def test_experience_search(self, engine) -> None:
        result = engine.search(FilterSet(domain=Domain.EXPERIENCES))
        assert result.ids == ["E1", "E2"]
        assert result.domain is Domain.EXPERIENCES

    def test_explicit_domain_overrides_filter_set(self, engine) -> None:
        assert engine.search(FilterSet(query="kayak"), Domain.EXPERIENCES).ids == ["E1"]

    def test_dates_and_seasons_do_not_apply(self, engine) -> None:
        result = engine.search(FilterSet(domain="experiences", seasons=("sep_may",), **JULY_12_20))
        assert result.ids == ["E1", "E2"]
        assert result.availability_filter_applied is False


def test_listing_candidate_is_read_only() -> None:
    c = ListingCandidate(id="X", domain=Domain.PROPERTIES, attributes={"id": "X"})
    with pytest.raises(AttributeError):
        c.id = "Y"
