"""Pytest fixtures."""

from datetime import date

import pytest

from stay_search.connectors import MemoryOccupancyOracle, MemoryRepository
from stay_search.models import BlockedDay, FilterDefaults, SearchSettings
from stay_search.search import SearchEngine

PROPERTY_ROWS = [
    {
        "id": "A",
        "title": "Piso en la playa",
        "description": "Apartamento junto al mar",
        "location": "Valencia",
        "region": "costa",
        "tipo": "piso",
        "bedrooms": 2,
        "bathrooms": 1,
        "price": 400,
        "precio_dia": 60,
        "precio_mes": 900,
        "precio_entresemana": 60,
        "precio_fin_de_semana": 90,
        "amenities": ["Wifi", "Piscina"],
        "meses_temporada": ["sep_jun"],
    },
    {
        "id": "B",
        "title": "Ático céntrico",
        "description": "Vistas a la ciudad",
        "location": "Madrid",
        "region": "centro",
        "tipo": "atico",
        "bedrooms": 3,
        "bathrooms": 2,
        "price": 700,
        "precio_dia": 150,
        "precio_mes": 1800,
        "precio_entresemana": 150,
        "precio_fin_de_semana": 200,
        "amenities": ["Wifi"],
        "meses_temporada": ["oct_may"],
    },
    {
        "id": "C",
        "title": "Casa rural",
        "description": "Casa con jardín y piscina",
        "location": "Granada",
        "region": "sur",
        "tipo": "casa",
        "bedrooms": 4,
        "bathrooms": 2,
        "price": 500,
        "precio_dia": 80,
        "precio_mes": 1200,
        "precio_entresemana": 80,
        "precio_fin_de_semana": 120,
        "amenities": ["Wifi", "Piscina", "Parking"],
        "meses_temporada": ["sep_may", "oct_jun"],
    },
    {
        "id": "D",
        "title": "Estudio",
        "description": "Ideal para estudiantes",
        "location": "Valencia",
        "region": "costa",
        "tipo": "estudio",
        "bedrooms": 1,
        "bathrooms": 1,
        "price": 300,
        "precio_dia": 40,
        "precio_mes": 700,
        "precio_entresemana": 40,
        "precio_fin_de_semana": 55,
        "amenities": [],
        "meses_temporada": None,
    },
]

EXPERIENCE_ROWS = [
    {
        "id": "E1",
        "name": "Ruta en kayak",
        "description": "Recorrido por la costa",
        "location": "Valencia",
        "region": "costa",
        "category": "aventura",
        "duration_hours": 3,
        "max_participants": 8,
        "price": 45,
    },
    {
        "id": "E2",
        "name": "Cata de vinos",
        "description": "Bodega local",
        "location": "Madrid",
        "region": "centro",
        "category": "gastronomia",
        "duration_hours": 2,
        "max_participants": 12,
        "price": 60,
    },
]

BOOKING_ROWS = [
    {"id": "bk-1", "property_id": "A", "start_date": "2024-07-10", "end_date": "2024-07-15", "status": "confirmed"},
    {"id": "bk-2", "property_id": "B", "start_date": "2024-07-12", "end_date": "2024-07-14", "status": "cancelled"},
    {"id": "bk-3", "property_id": "C", "start_date": "2024-08-01", "end_date": "2024-08-10", "status": "confirmed"},
]

BLOCKED_ROWS = [
    {"property_id": "D", "date": "2024-07-18"},
]


@pytest.fixture
def seed() -> dict:
    """Seed document in the shape `stay-search load` accepts."""
    return {
        "properties": [dict(r) for r in PROPERTY_ROWS],
        "experiences": [dict(r) for r in EXPERIENCE_ROWS],
        "bookings": [dict(r) for r in BOOKING_ROWS],
        "blocked_dates": [dict(r) for r in BLOCKED_ROWS],
    }


@pytest.fixture
def defaults() -> FilterDefaults:
    return FilterDefaults(price_max=1000, price_per_day=500, price_per_month=5000)


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings(
        day_rate_multiplier=2.0,
        oracle_timeout_seconds=1.0,
        debounce_seconds=0.0,
        confirmed_status="confirmed",
    )


@pytest.fixture
def repository(seed: dict) -> MemoryRepository:
    return MemoryRepository.from_seed(seed)


@pytest.fixture
def oracle() -> MemoryOccupancyOracle:
    return MemoryOccupancyOracle(
        reservations=[
            ("A", date(2024, 7, 10), date(2024, 7, 15), "confirmed"),
            ("B", date(2024, 7, 12), date(2024, 7, 14), "cancelled"),
            ("C", date(2024, 8, 1), date(2024, 8, 10), "confirmed"),
        ],
        blocked=[BlockedDay("D", date(2024, 7, 18))],
    )


@pytest.fixture
def engine(repository, oracle, defaults, settings) -> SearchEngine:
    return SearchEngine(repository, oracle, defaults=defaults, settings=settings)
