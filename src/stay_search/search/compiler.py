"""Compile a FilterSet into backend-expressible predicates."""

from __future__ import annotations

import logging

from ..models import AnyOf, Domain, FilterDefaults, FilterSet, Predicate, QueryDescriptor

logger = logging.getLogger(__name__)

# Columns searched by the free-text query, per domain
TEXT_COLUMNS = {
    Domain.PROPERTIES: ("title", "description"),
    Domain.EXPERIENCES: ("name", "description"),
}

WEEKDAY_RATE = "precio_entresemana"
WEEKEND_RATE = "precio_fin_de_semana"


def _below(value: float | None, sentinel: float) -> bool:
    """A ceiling is active only when set and below the slider maximum."""
    return value is not None and value < sentinel


def _common(filters: FilterSet, domain: Domain, defaults: FilterDefaults) -> list[Predicate | AnyOf]:
    preds: list[Predicate | AnyOf] = []
    text = filters.query.strip()
    if text:
        preds.append(AnyOf(tuple(Predicate(col, "ilike", text) for col in TEXT_COLUMNS[domain])))
    if filters.location.strip():
        preds.append(Predicate("location", "ilike", filters.location.strip()))
    if filters.zone:
        preds.append(Predicate("region", "eq", filters.zone))
    if _below(filters.price_max, defaults.price_max):
        preds.append(Predicate("price", "lte", filters.price_max))
    return preds


def _properties(
    filters: FilterSet,
    defaults: FilterDefaults,
    day_rate_multiplier: float,
) -> list[Predicate | AnyOf]:
    preds: list[Predicate | AnyOf] = []
    if filters.property_type:
        preds.append(Predicate("tipo", "eq", filters.property_type))
    if filters.bedrooms > 0:
        preds.append(Predicate("bedrooms", "gte", filters.bedrooms))
    if filters.bathrooms > 0:
        preds.append(Predicate("bathrooms", "gte", filters.bathrooms))
    if _below(filters.price_per_day, defaults.price_per_day):
        # Weekday and weekend rates are stored separately; accept either
        # within the loosened ceiling.
        ceiling = filters.price_per_day * day_rate_multiplier
        preds.append(
            AnyOf((
                Predicate(WEEKDAY_RATE, "lte", ceiling),
                Predicate(WEEKEND_RATE, "lte", ceiling),
            ))
        )
    if _below(filters.price_per_month, defaults.price_per_month):
        preds.append(Predicate("precio_mes", "lte", filters.price_per_month))
    for amenity in filters.amenities:
        preds.append(Predicate("amenities", "contains", amenity))
    return preds


def _experiences(filters: FilterSet) -> list[Predicate | AnyOf]:
    preds: list[Predicate | AnyOf] = []
    if filters.category:
        preds.append(Predicate("category", "eq", filters.category))
    if filters.experience_type:
        preds.append(Predicate("category", "eq", filters.experience_type))
    if filters.duration_hours is not None:
        preds.append(Predicate("duration_hours", "eq", int(filters.duration_hours)))
    if filters.max_participants is not None:
        preds.append(Predicate("max_participants", "lte", int(filters.max_participants)))
    return preds


def compile_filters(
    filters: FilterSet,
    domain: Domain | str | None = None,
    defaults: FilterDefaults | None = None,
    day_rate_multiplier: float = 2.0,
) -> QueryDescriptor:
    """
    Translate the backend-expressible part of a FilterSet into a QueryDescriptor.
    Season tags and the date range are resolved client-side and never compiled.
    Fields that don't apply to the domain are ignored.
    """
    domain = Domain(domain) if domain is not None else filters.domain
    defaults = defaults or FilterDefaults(price_max=1000, price_per_day=500, price_per_month=5000)

    preds = _common(filters, domain, defaults)
    if domain is Domain.PROPERTIES:
        preds.extend(_properties(filters, defaults, day_rate_multiplier))
    else:
        preds.extend(_experiences(filters))

    descriptor = QueryDescriptor(domain=domain, predicates=tuple(preds))
    logger.debug("Compiled %d predicate(s) for %s", len(preds), domain.value)
    return descriptor
