"""DuckDB catalog of listings, reservations and blocked days."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import duckdb

from ..connectors.base import ListingRepository, OccupancyOracle
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

logger = logging.getLogger(__name__)

PROPERTY_COLUMNS = [
    "id", "title", "description", "location", "region", "tipo", "bedrooms", "bathrooms",
    "price", "precio_dia", "precio_mes", "precio_entresemana", "precio_fin_de_semana",
    "amenities", "meses_temporada",
]
EXPERIENCE_COLUMNS = [
    "id", "name", "description", "location", "region", "category",
    "duration_hours", "max_participants", "price",
]


def _predicate_sql(pred: Predicate | AnyOf) -> tuple[str, list[Any]]:
    """Render one predicate as a SQL fragment plus bind parameters."""
    if isinstance(pred, AnyOf):
        parts, params = [], []
        for p in pred.options:
            sql, p_params = _predicate_sql(p)
            parts.append(sql)
            params.extend(p_params)
        return "(" + " OR ".join(parts) + ")", params
    col = '"' + pred.column.replace('"', "") + '"'
    if pred.op == "eq":
        return f"{col} = ?", [pred.value]
    if pred.op == "gte":
        return f"{col} >= ?", [pred.value]
    if pred.op == "lte":
        return f"{col} <= ?", [pred.value]
    if pred.op == "ilike":
        return f"contains(lower({col}), ?)", [str(pred.value).lower()]
    if pred.op == "contains":
        return f"list_contains({col}, ?)", [pred.value]
    raise ValueError(f"Unknown predicate op: {pred.op}")


def build_query(descriptor: QueryDescriptor) -> tuple[str, list[Any]]:
    """Translate a QueryDescriptor into a parameterised SELECT."""
    clauses: list[str] = []
    params: list[Any] = []
    for pred in descriptor.predicates:
        sql, p_params = _predicate_sql(pred)
        clauses.append(sql)
        params.extend(p_params)
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    return f"SELECT * FROM {descriptor.table}{where} ORDER BY id", params


class Storage(ListingRepository, OccupancyOracle):
    """
    DuckDB storage for properties, experiences, bookings and blocked_dates.
    Serves as both the listing repository and the occupancy oracle.
    """

    def __init__(self, db_path: Path | str = "stay_search.duckdb") -> None:
        self.db_path = Path(db_path)
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._lock = threading.Lock()

    @property
    def source_name(self) -> str:
        return "duckdb"

    def _connect(self) -> duckdb.DuckDBPyConnection:
        with self._lock:
            if self._conn is None:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = duckdb.connect(str(self.db_path))
                self._init_schema()
            return self._conn

    def _init_schema(self) -> None:
        conn = self._conn
        conn.execute("""
            CREATE TABLE IF NOT EXISTS properties (
                id TEXT PRIMARY KEY,
                title TEXT,
                description TEXT,
                location TEXT,
                region TEXT,
                tipo TEXT,
                bedrooms INTEGER,
                bathrooms INTEGER,
                price DOUBLE,
                precio_dia DOUBLE,
                precio_mes DOUBLE,
                precio_entresemana DOUBLE,
                precio_fin_de_semana DOUBLE,
                amenities VARCHAR[],
                meses_temporada VARCHAR[]
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS experiences (
                id TEXT PRIMARY KEY,
                name TEXT,
                description TEXT,
                location TEXT,
                region TEXT,
                category TEXT,
                duration_hours INTEGER,
                max_participants INTEGER,
                price DOUBLE
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS bookings (
                id TEXT PRIMARY KEY,
                property_id TEXT,
                start_date DATE,
                end_date DATE,
                status TEXT
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS blocked_dates (
                property_id TEXT,
                date DATE,
                PRIMARY KEY (property_id, date)
            )
        """)

    def _upsert(self, table: str, columns: list[str], rows: list[dict[str, Any]]) -> None:
        conn = self._connect()
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT OR REPLACE INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        for row in rows:
            conn.execute(sql, [row.get(c) for c in columns])

    def load_seed(self, data: dict[str, Any]) -> dict[str, int]:
        """Upsert a seed document: {properties, experiences, bookings, blocked_dates}."""
        properties = [{**p, "id": str(p["id"])} for p in data.get("properties", [])]
        experiences = [{**e, "id": str(e["id"])} for e in data.get("experiences", [])]
        bookings = []
        for b in data.get("bookings", []):
            start, end = parse_date(b["start_date"]), parse_date(b["end_date"])
            bookings.append({
                "id": str(b.get("id") or f"{b['property_id']}:{start}:{end}"),
                "property_id": str(b["property_id"]),
                "start_date": start,
                "end_date": end,
                "status": b.get("status", ""),
            })
        blocked = [
            {"property_id": str(d["property_id"]), "date": parse_date(d["date"])}
            for d in data.get("blocked_dates", [])
        ]

        conn = self._connect()
        conn.execute("BEGIN TRANSACTION")
        try:
            self._upsert("properties", PROPERTY_COLUMNS, properties)
            self._upsert("experiences", EXPERIENCE_COLUMNS, experiences)
            self._upsert("bookings", ["id", "property_id", "start_date", "end_date", "status"], bookings)
            self._upsert("blocked_dates", ["property_id", "date"], blocked)
        except duckdb.Error:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
        counts = {
            "properties": len(properties),
            "experiences": len(experiences),
            "bookings": len(bookings),
            "blocked_dates": len(blocked),
        }
        logger.info("Loaded seed: %s", counts)
        return counts

    def _read(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        # A cursor per read so the oracle's concurrent lookups don't share a connection
        cur = self._connect().cursor()
        try:
            rel = cur.execute(sql, params)
            cols = [d[0] for d in rel.description]
            return [dict(zip(cols, row)) for row in rel.fetchall()]
        finally:
            cur.close()

    def find(self, domain: Domain, descriptor: QueryDescriptor) -> list[ListingCandidate]:
        sql, params = build_query(descriptor)
        try:
            rows = self._read(sql, params)
        except (duckdb.Error, OSError) as e:
            raise RepositoryError(f"{domain.value}: {e!s}") from e
        return [ListingCandidate.from_row(r, domain) for r in rows]

    def find_busy_intervals(self, status: str, overlapping: DateRange) -> list[BusyInterval]:
        try:
            rows = self._read(
                """
                SELECT property_id, start_date, end_date FROM bookings
                WHERE status = ? AND start_date <= ? AND end_date >= ?
                ORDER BY property_id, start_date
                """,
                [status, overlapping.end, overlapping.start],
            )
        except (duckdb.Error, OSError) as e:
            raise OccupancyLookupError(f"bookings: {e!s}") from e
        return [BusyInterval(r["property_id"], r["start_date"], r["end_date"]) for r in rows]

    def find_blocked_days(self, within: DateRange) -> list[BlockedDay]:
        try:
            rows = self._read(
                "SELECT property_id, date FROM blocked_dates WHERE date BETWEEN ? AND ? ORDER BY property_id, date",
                [within.start, within.end],
            )
        except (duckdb.Error, OSError) as e:
            raise OccupancyLookupError(f"blocked_dates: {e!s}") from e
        return [BlockedDay(r["property_id"], r["date"]) for r in rows]

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
