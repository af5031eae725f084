"""Data models for search requests, listings, occupancy and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from .errors import InvalidDateRange

# Recurring long-stay windows (start month to end month). Opaque to the engine.
KNOWN_SEASON_TAGS = ("sep_may", "sep_jun", "sep_jul", "oct_may", "oct_jun", "oct_jul")


class Domain(str, Enum):
    """Search domain. Properties and experiences have disjoint attribute sets."""

    PROPERTIES = "properties"
    EXPERIENCES = "experiences"


def parse_date(value: Any) -> date | None:
    """Parse a date from a date, datetime or ISO string ('2024-07-10', '2024-07-10T00:00:00Z')."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def _as_tags(value: Any) -> tuple[str, ...]:
    """A lone string is one tag, not a sequence of characters."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = (value,)
    return tuple(str(v) for v in value if v)


@dataclass(frozen=True)
class DateRange:
    """Closed calendar range, both ends inclusive."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidDateRange(self.start, self.end)

    def overlaps(self, start: date, end: date) -> bool:
        return start <= self.end and end >= self.start

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class BusyInterval:
    """Confirmed reservation occupying a listing from start to end (inclusive)."""

    listing_id: str
    start: date
    end: date


@dataclass(frozen=True)
class BlockedDay:
    """Single day manually blocked by the host."""

    listing_id: str
    date: date


@dataclass(frozen=True)
class ListingCandidate:
    """
    Listing row as returned by a repository.
    The engine only reads it; attributes keep the backend column names.
    """

    id: str
    domain: Domain
    attributes: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_row(cls, row: dict[str, Any], domain: Domain) -> ListingCandidate:
        return cls(id=str(row["id"]), domain=domain, attributes=dict(row))

    def get(self, column: str, default: Any = None) -> Any:
        return self.attributes.get(column, default)

    @property
    def title(self) -> str:
        return str(self.get("title") or self.get("name") or "")

    @property
    def season_tags(self) -> tuple[str, ...] | None:
        tags = self.get("meses_temporada")
        if tags is None:
            return None
        return tuple(str(t) for t in tags)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "domain": self.domain.value, **self.attributes}


@dataclass(frozen=True)
class FilterSet:
    """
    A single search request. Unset fields are None (or empty for tag lists).
    Property-only and experience-only fields are ignored by the other domain.
    """

    domain: Domain = Domain.PROPERTIES
    query: str = ""
    location: str = ""
    zone: str = ""
    check_in: date | None = None
    check_out: date | None = None
    price_max: float | None = None
    # Properties
    price_per_day: float | None = None
    price_per_month: float | None = None
    bedrooms: int = 0
    bathrooms: int = 0
    property_type: str = ""
    amenities: tuple[str, ...] = ()
    seasons: tuple[str, ...] = ()
    # Experiences
    category: str = ""
    experience_type: str = ""
    duration_hours: int | None = None
    max_participants: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "domain", Domain(self.domain))
        object.__setattr__(self, "check_in", parse_date(self.check_in))
        object.__setattr__(self, "check_out", parse_date(self.check_out))
        object.__setattr__(self, "amenities", _as_tags(self.amenities))
        object.__setattr__(self, "seasons", _as_tags(self.seasons))
        if self.check_in and self.check_out and self.check_in > self.check_out:
            raise InvalidDateRange(self.check_in, self.check_out)

    @property
    def date_range(self) -> DateRange | None:
        """Requested stay, or None when either bound is missing."""
        if self.check_in is None or self.check_out is None:
            return None
        return DateRange(self.check_in, self.check_out)


@dataclass(frozen=True)
class Predicate:
    """Single backend-expressible column test."""

    column: str
    op: str  # eq, gte, lte, ilike (substring), contains (array containment)
    value: Any


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of predicates; the row matches if any option does."""

    options: tuple[Predicate, ...]


@dataclass(frozen=True)
class QueryDescriptor:
    """Conjunction of predicates against one domain's table. Empty matches all."""

    domain: Domain
    predicates: tuple[Predicate | AnyOf, ...] = ()

    @property
    def table(self) -> str:
        return self.domain.value

    @property
    def is_match_all(self) -> bool:
        return not self.predicates


@dataclass
class ResultSet:
    """Final ordered search result plus diagnostics for the empty-state message."""

    listings: list[ListingCandidate]
    domain: Domain
    availability_filter_applied: bool = False
    availability_check_failed: bool = False
    candidates_count: int = 0
    excluded_unavailable: int = 0
    excluded_by_season: int = 0

    def __len__(self) -> int:
        return len(self.listings)

    @property
    def ids(self) -> list[str]:
        return [l.id for l in self.listings]

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain.value,
            "count": len(self.listings),
            "availability_filter_applied": self.availability_filter_applied,
            "availability_check_failed": self.availability_check_failed,
            "candidates_count": self.candidates_count,
            "excluded_unavailable": self.excluded_unavailable,
            "excluded_by_season": self.excluded_by_season,
            "listings": [l.to_dict() for l in self.listings],
        }


@dataclass
class FilterDefaults:
    """Slider values that mean "no filter"."""

    price_max: float
    price_per_day: float
    price_per_month: float


@dataclass
class SearchSettings:
    """Engine tuning parameters."""

    day_rate_multiplier: float
    oracle_timeout_seconds: float
    debounce_seconds: float
    confirmed_status: str


@dataclass
class BackendSettings:
    """Where listings and occupancy are read from."""

    kind: str
    db_path: str
    postgrest_url: str
    timeout_seconds: float
