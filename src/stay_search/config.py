"""Configuration loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .models import BackendSettings, FilterDefaults, SearchSettings


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from YAML file."""
    path = Path(config_path) if config_path else Path(__file__).parent.parent.parent / "config.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path) as f:
        return yaml.safe_load(f) or {}


def get_filter_defaults(config: dict[str, Any]) -> FilterDefaults:
    """Extract slider sentinels from config."""
    fl = config.get("filters", {})
    return FilterDefaults(
        price_max=float(fl.get("price_max", 1000)),
        price_per_day=float(fl.get("price_per_day", 500)),
        price_per_month=float(fl.get("price_per_month", 5000)),
    )


def get_search_settings(config: dict[str, Any]) -> SearchSettings:
    """Extract engine settings from config."""
    s = config.get("search", {})
    return SearchSettings(
        day_rate_multiplier=float(s.get("day_rate_multiplier", 2.0)),
        oracle_timeout_seconds=float(s.get("oracle_timeout_seconds", 5.0)),
        debounce_seconds=float(s.get("debounce_seconds", 0.5)),
        confirmed_status=str(s.get("confirmed_status", "confirmed")),
    )


def get_backend_settings(config: dict[str, Any]) -> BackendSettings:
    """Extract backend settings. POSTGREST_URL in the environment wins over the file."""
    b = config.get("backend", {})
    return BackendSettings(
        kind=str(b.get("kind", "duckdb")).lower(),
        db_path=str(b.get("db_path", "output/stay_search.duckdb")),
        postgrest_url=os.environ.get("POSTGREST_URL") or str(b.get("postgrest_url", "")),
        timeout_seconds=float(b.get("timeout_seconds", 30)),
    )
