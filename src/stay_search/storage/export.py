"""Export search results to CSV and JSON."""

from __future__ import annotations

import csv
import json
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..models import ResultSet


def _serialize(obj: Any) -> Any:
    """JSON serializer for dates and other objects."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def export_csv(result: ResultSet, path: Path | str) -> None:
    """Export result rows to CSV, one listing per line in result order."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "rank",
        "id",
        "title",
        "location",
        "region",
        "price",
        "precio_entresemana",
        "precio_fin_de_semana",
        "precio_mes",
        "bedrooms",
        "bathrooms",
        "amenities",
        "meses_temporada",
    ]

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for i, l in enumerate(result.listings, 1):
            writer.writerow({
                "rank": i,
                "id": l.id,
                "title": l.title,
                "location": l.get("location", ""),
                "region": l.get("region", ""),
                "price": l.get("price", ""),
                "precio_entresemana": l.get("precio_entresemana", ""),
                "precio_fin_de_semana": l.get("precio_fin_de_semana", ""),
                "precio_mes": l.get("precio_mes", ""),
                "bedrooms": l.get("bedrooms", ""),
                "bathrooms": l.get("bathrooms", ""),
                "amenities": " | ".join(l.get("amenities") or []),
                "meses_temporada": " | ".join(l.season_tags or ()),
            })


def export_json(result: ResultSet, path: Path | str) -> None:
    """Export the full result, diagnostics included, to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "run_at": datetime.utcnow().isoformat(),
        **result.to_dict(),
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_serialize)
