"""PostgREST (hosted Postgres) connectors.

Reads tables: properties, experiences, bookings, blocked_dates.
Compiled predicates map onto PostgREST operators: eq, gte, lte, ilike, cs, or/and.
"""

from __future__ import annotations

import os
from typing import Any

import httpx

from ..errors import OccupancyLookupError, RepositoryError
from ..models import (
    AnyOf,
    BlockedDay,
    BusyInterval,
    DateRange,
    Domain,
    ListingCandidate,
    Predicate,
    QueryDescriptor,
    parse_date,
)
from .base import ListingRepository, OccupancyOracle

_RESERVED = set(',.:()"\\ ')


def _format_value(val: Any) -> str:
    """Render a scalar the way PostgREST parses it."""
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val)


def _quote(s: str) -> str:
    """Quote values containing characters reserved inside or=(...) groups."""
    if any(c in _RESERVED for c in s):
        return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return s


def _escape_like(s: str) -> str:
    """Make LIKE metacharacters literal; PostgREST only expands `*`."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _array_literal(val: Any) -> str:
    item = str(val).replace("\\", "\\\\").replace('"', '\\"')
    return '{"' + item + '"}'


def _operand(pred: Predicate, nested: bool) -> str:
    """Operator + value, e.g. 'lte.100' or 'ilike.*playa*'."""
    if pred.op == "ilike":
        value = f"*{_escape_like(str(pred.value))}*"
        return f"ilike.{_quote(value) if nested else value}"
    if pred.op == "contains":
        return f"cs.{_array_literal(pred.value)}"
    if pred.op in ("eq", "gte", "lte"):
        value = _format_value(pred.value)
        return f"{pred.op}.{_quote(value) if nested else value}"
    raise ValueError(f"Unknown predicate op: {pred.op}")


def _group(any_of: AnyOf) -> str:
    return ",".join(f"{p.column}.{_operand(p, nested=True)}" for p in any_of.options)


def build_params(descriptor: QueryDescriptor) -> list[tuple[str, str]]:
    """Translate a QueryDescriptor into PostgREST query parameters."""
    params: list[tuple[str, str]] = [("select", "*")]
    groups: list[AnyOf] = []
    for pred in descriptor.predicates:
        if isinstance(pred, AnyOf):
            groups.append(pred)
        else:
            params.append((pred.column, _operand(pred, nested=False)))
    if len(groups) == 1:
        params.append(("or", f"({_group(groups[0])})"))
    elif groups:
        params.append(("and", "(" + ",".join(f"or({_group(g)})" for g in groups) + ")"))
    params.append(("order", "id.asc"))
    return params


class _PostgrestClient:
    """Shared HTTP plumbing for the repository and the oracle."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or os.environ.get("POSTGREST_URL", "")).rstrip("/")
        self.api_key = api_key or os.environ.get("POSTGREST_API_KEY", "")
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get(self, table: str, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        """GET rows from a table. Raises httpx.HTTPError, httpx.InvalidURL or ValueError on failure."""
        if not self.base_url:
            raise ValueError("POSTGREST_URL not set. Set env var or pass base_url.")
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            resp = client.get(f"{self.base_url}/{table}", params=params, headers=self._headers())
        if resp.status_code != 200:
            raise ValueError(f"{table}: HTTP {resp.status_code}")
        data = resp.json()
        if not isinstance(data, list):
            raise ValueError(f"{table}: unexpected response shape")
        return [row for row in data if isinstance(row, dict)]


class PostgrestRepository(_PostgrestClient, ListingRepository):
    """Listing repository backed by PostgREST tables `properties` and `experiences`."""

    @property
    def source_name(self) -> str:
        return "postgrest"

    def find(self, domain: Domain, descriptor: QueryDescriptor) -> list[ListingCandidate]:
        try:
            rows = self._get(descriptor.table, build_params(descriptor))
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise RepositoryError(f"{domain.value}: {e!s}") from e
        return [ListingCandidate.from_row(r, domain) for r in rows if r.get("id") is not None]


class PostgrestOccupancyOracle(_PostgrestClient, OccupancyOracle):
    """Reads `bookings` and `blocked_dates`, filtering by range server-side."""

    def find_busy_intervals(self, status: str, overlapping: DateRange) -> list[BusyInterval]:
        params = [
            ("select", "property_id,start_date,end_date,status"),
            ("status", f"eq.{status}"),
            ("start_date", f"lte.{overlapping.end.isoformat()}"),
            ("end_date", f"gte.{overlapping.start.isoformat()}"),
        ]
        try:
            rows = self._get("bookings", params)
            return [
                BusyInterval(str(r["property_id"]), parse_date(r["start_date"]), parse_date(r["end_date"]))
                for r in rows
            ]
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, KeyError) as e:
            raise OccupancyLookupError(f"bookings: {e!s}") from e

    def find_blocked_days(self, within: DateRange) -> list[BlockedDay]:
        params = [
            ("select", "property_id,date"),
            ("date", f"gte.{within.start.isoformat()}"),
            ("date", f"lte.{within.end.isoformat()}"),
        ]
        try:
            rows = self._get("blocked_dates", params)
            return [BlockedDay(str(r["property_id"]), parse_date(r["date"])) for r in rows]
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, KeyError) as e:
            raise OccupancyLookupError(f"blocked_dates: {e!s}") from e
