"""Client-side listing filters: season matching and predicate evaluation."""

from __future__ import annotations

from typing import Any, Iterable

from .models import AnyOf, ListingCandidate, Predicate, QueryDescriptor


def matches_seasons(listing: ListingCandidate, requested: Iterable[str]) -> bool:
    """
    True if the listing shares at least one season tag with the request.
    - An empty request always matches
    - A listing without season tags never matches a non-empty request
    """
    wanted = set(requested)
    if not wanted:
        return True
    tags = listing.season_tags
    if not tags:
        return False
    return not wanted.isdisjoint(tags)


def _test(pred: Predicate, value: Any) -> bool:
    if value is None:
        return False
    if pred.op == "eq":
        return value == pred.value
    if pred.op == "gte":
        return value >= pred.value
    if pred.op == "lte":
        return value <= pred.value
    if pred.op == "ilike":
        return str(pred.value).lower() in str(value).lower()
    if pred.op == "contains":
        return isinstance(value, (list, tuple, set)) and pred.value in value
    raise ValueError(f"Unknown predicate op: {pred.op}")


def evaluate(predicate: Predicate | AnyOf, row: dict[str, Any]) -> bool:
    """Evaluate one compiled predicate against a row (NULL never matches)."""
    if isinstance(predicate, AnyOf):
        return any(evaluate(p, row) for p in predicate.options)
    return _test(predicate, row.get(predicate.column))


def filter_candidates(
    listings: list[ListingCandidate],
    descriptor: QueryDescriptor,
) -> list[ListingCandidate]:
    """Apply a query descriptor in memory, preserving order."""
    return [
        l
        for l in listings
        if l.domain == descriptor.domain
        and all(evaluate(p, l.attributes) for p in descriptor.predicates)
    ]
