"""Shared CLI helpers: console, logger, output paths, report rendering."""

import json
from pathlib import Path

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from stockline.config import OUTPUT_DIR
from stockline.models.reports import BatchHealthStatus, BatchVinHealthReport
from stockline.models.results import ImportResult
from stockline.utils.logger import get_logger

console = Console()
logger = get_logger("stockline.cli")

_STATUS_STYLE = {
    "healthy": "green",
    "ready": "green",
    "warning": "yellow",
    "critical": "red",
    "blocked": "red",
}


def styled(status: str) -> str:
    style = _STATUS_STYLE.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def write_json_result(result: BaseModel, name: str, path: Path | None = None) -> Path:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    path = path or OUTPUT_DIR / f"{name}.json"
    with path.open("w", encoding="utf-8") as f:
        json.dump(result.model_dump(mode="json"), f, indent=2)
    logger.info("results.write_json", path=str(path))
    return path


def print_import_result(kind: str, result: ImportResult) -> None:
    console.print(
        f"[bold]{kind}[/bold]: {result.success} imported, "
        f"{result.stats.skipped_rows} skipped of {result.stats.total_rows} rows"
    )
    for error in result.errors:
        console.print(f"  [red]{error}[/red]")


def print_vin_report(report: BatchVinHealthReport, show_ready: bool = False) -> None:
    s = report.summary
    console.print(f"\n[bold]VIN health for {s.batch_id}[/bold]")
    console.print(f"  VINs: {s.total_vins}  ready: [green]{s.ready_vins}[/green]  blocked: [red]{s.blocked_vins}[/red]")

    table = Table(title="VINs")
    table.add_column("VIN", style="cyan")
    table.add_column("Car type")
    table.add_column("Status", justify="center")
    table.add_column("Missing")
    for r in report.results:
        if r.status == "ready" and not show_ready:
            continue
        missing = ", ".join(f"{m.sku} (-{m.shortfall})" for m in r.missing)
        table.add_row(r.vin, r.car_type, styled(r.status), missing)
    if table.row_count:
        console.print(table)

    if s.top_shortages:
        shortages = Table(title="Top shortages")
        shortages.add_column("SKU", style="cyan")
        shortages.add_column("Shortfall", justify="right")
        for t in s.top_shortages:
            shortages.add_row(t.sku, str(t.total_shortfall))
        console.print(shortages)


def print_batch_health(health: BatchHealthStatus) -> None:
    console.print(
        f"[bold]{health.batch_id}[/bold] {styled(health.status)}  "
        f"cars remaining {health.cars_remaining}/{health.total_cars}, can produce {health.can_produce_cars}"
    )
    if health.blocked_components:
        table = Table(title="Blocked components")
        table.add_column("SKU", style="cyan")
        table.add_column("Name")
        table.add_column("Needed", justify="right")
        table.add_column("Available", justify="right")
        table.add_column("Shortfall", justify="right", style="red")
        for c in health.blocked_components:
            table.add_row(c.sku, c.name or "", str(c.needed), str(c.available), str(c.shortfall))
        console.print(table)
    if health.excess_components:
        console.print(
            "  [dim]Excess: " + ", ".join(f"{c.sku} (+{c.excess})" for c in health.excess_components) + "[/dim]"
        )
