"""CLI for the stay-search availability engine."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import get_backend_settings, load_config
from .connectors import PostgrestOccupancyOracle, PostgrestRepository
from .errors import InvalidDateRange, RepositoryError
from .models import KNOWN_SEASON_TAGS, Domain, FilterSet, ResultSet
from .search import SearchEngine
from .storage import Storage, export_csv, export_json

app = typer.Typer(
    name="stay-search",
    help="Search stays and experiences with availability and season filtering",
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fmt_money(val: object) -> str:
    if val is None or val == "":
        return "-"
    try:
        return f"€{float(val):,.0f}"
    except (TypeError, ValueError):
        return str(val)


def _display_results(result: ResultSet, limit: int = 20) -> None:
    """Display result table, or an empty-state message that reflects the filters that ran."""
    if result.availability_check_failed:
        console.print("[yellow]Availability could not be checked; showing listings without date filtering.[/yellow]")

    if not result.listings:
        if result.availability_filter_applied:
            console.print("[yellow]No listings available for those dates.[/yellow]")
        else:
            console.print("[yellow]No listings match these filters.[/yellow]")
        return

    table = Table(title=f"{result.domain.value.title()} ({len(result)} of {result.candidates_count})")
    table.add_column("Rank", style="dim")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Location")
    if result.domain is Domain.PROPERTIES:
        table.add_column("Weekday", justify="right")
        table.add_column("Weekend", justify="right")
        table.add_column("Month", justify="right")
        table.add_column("Beds", justify="right")
        table.add_column("Seasons", style="dim")
    else:
        table.add_column("Category")
        table.add_column("Hours", justify="right")
        table.add_column("Price", justify="right")

    for i, l in enumerate(result.listings[:limit], 1):
        title = l.title[:30] + "..." if len(l.title) > 30 else l.title
        row = [str(i), l.id, title, str(l.get("location") or "")]
        if result.domain is Domain.PROPERTIES:
            row += [
                _fmt_money(l.get("precio_entresemana")),
                _fmt_money(l.get("precio_fin_de_semana")),
                _fmt_money(l.get("precio_mes")),
                str(l.get("bedrooms") or "-"),
                ", ".join(l.season_tags or ()),
            ]
        else:
            row += [
                str(l.get("category") or ""),
                str(l.get("duration_hours") or "-"),
                _fmt_money(l.get("price")),
            ]
        table.add_row(*row)

    console.print(table)
    if result.availability_filter_applied:
        console.print(f"[dim]{result.excluded_unavailable} listing(s) unavailable for the requested dates[/dim]")


@app.command()
def load(
    seed_path: Path = typer.Argument(..., help="JSON file with properties, experiences, bookings, blocked_dates"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Import a seed file into the local DuckDB catalog."""
    cfg = load_config(config_path)
    backend = get_backend_settings(cfg)
    if not seed_path.exists():
        console.print(f"[red]Seed file not found: {seed_path}[/red]")
        raise typer.Exit(1)
    with open(seed_path, encoding="utf-8") as f:
        data = json.load(f)

    storage = Storage(backend.db_path)
    counts = storage.load_seed(data)
    storage.close()
    summary = ", ".join(f"{n} {k}" for k, n in counts.items())
    console.print(f"[green]Loaded {summary} into {backend.db_path}[/green]")


@app.command()
def search(
    domain: Domain = typer.Option(Domain.PROPERTIES, "--domain", "-d", help="properties or experiences"),
    query: str = typer.Option("", "--query", "-q", help="Text in title/name or description"),
    location: str = typer.Option("", "--location", "-l"),
    zone: str = typer.Option("", "--zone", "-z", help="Exact region"),
    check_in: Optional[str] = typer.Option(None, "--check-in", help="YYYY-MM-DD"),
    check_out: Optional[str] = typer.Option(None, "--check-out", help="YYYY-MM-DD"),
    price_max: Optional[float] = typer.Option(None, "--price-max"),
    price_per_day: Optional[float] = typer.Option(None, "--price-per-day"),
    price_per_month: Optional[float] = typer.Option(None, "--price-per-month"),
    bedrooms: int = typer.Option(0, "--bedrooms", help="Minimum bedrooms"),
    bathrooms: int = typer.Option(0, "--bathrooms", help="Minimum bathrooms"),
    property_type: str = typer.Option("", "--type"),
    amenity: Optional[List[str]] = typer.Option(None, "--amenity", "-a", help="Required amenity (repeatable, all must match)"),
    season: Optional[List[str]] = typer.Option(None, "--season", "-s", help="Season tag (repeatable, any may match)"),
    category: str = typer.Option("", "--category"),
    duration: Optional[int] = typer.Option(None, "--duration", help="Experience duration in hours"),
    max_participants: Optional[int] = typer.Option(None, "--max-participants"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max rows to show"),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Export results to CSV"),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Export results to JSON"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Search listings against the configured backend."""
    cfg = load_config(config_path)
    for tag in season or []:
        if tag not in KNOWN_SEASON_TAGS:
            console.print(f"[yellow]Warning: unknown season tag '{tag}' (known: {', '.join(KNOWN_SEASON_TAGS)})[/yellow]")

    try:
        filters = FilterSet(
            domain=domain,
            query=query,
            location=location,
            zone=zone,
            check_in=check_in,
            check_out=check_out,
            price_max=price_max,
            price_per_day=price_per_day,
            price_per_month=price_per_month,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            property_type=property_type,
            amenities=tuple(amenity or ()),
            seasons=tuple(season or ()),
            category=category,
            duration_hours=duration,
            max_participants=max_participants,
        )
    except InvalidDateRange as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    except ValueError as e:
        console.print(f"[red]Invalid date: {e}[/red]")
        raise typer.Exit(2)

    backend = get_backend_settings(cfg)
    storage: Storage | None = None
    if backend.kind == "postgrest":
        repository = PostgrestRepository(base_url=backend.postgrest_url, timeout=backend.timeout_seconds)
        oracle = PostgrestOccupancyOracle(base_url=backend.postgrest_url, timeout=backend.timeout_seconds)
        engine = SearchEngine(repository, oracle, config=cfg)
    else:
        storage = Storage(backend.db_path)
        engine = SearchEngine(storage, storage, config=cfg)

    try:
        result = engine.search(filters)
    except RepositoryError as e:
        console.print(f"[red]Search unavailable, retry. ({e})[/red]")
        raise typer.Exit(1)
    finally:
        if storage is not None:
            storage.close()

    _display_results(result, limit=limit)
    if csv_path:
        export_csv(result, csv_path)
        console.print(f"  CSV:  {csv_path}")
    if json_path:
        export_json(result, json_path)
        console.print(f"  JSON: {json_path}")


if __name__ == "__main__":
    app()
