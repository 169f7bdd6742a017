"""Health reports and consistency checks."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from stockline.errors import NotFoundError
from stockline.services import inventory_store
from stockline.services.batch_health import get_batch_health_status, get_global_batch_health
from stockline.services.vin_health import compute_batch_health_by_vin

from .shared import console, logger, print_batch_health, print_vin_report, styled, write_json_result


def vin_health(
    batch_id: str = typer.Argument(..., help="Batch to check"),
    show_ready: bool = typer.Option(False, "--show-ready", help="Also list ready VINs"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report as JSON"),
) -> None:
    """Which planned VINs can be built from current stock."""
    log = logger.bind(command="vin-health", batch_id=batch_id)
    try:
        report = asyncio.run(compute_batch_health_by_vin(batch_id))
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
        log.warning("vin_health.not_found", error=str(e))
        raise typer.Exit(1) from e
    print_vin_report(report, show_ready=show_ready)
    if output:
        console.print(f"[green]Wrote {write_json_result(report, 'vin_health', output)}[/green]")


def batch_health(batch_id: str = typer.Argument(..., help="Activated batch to check")) -> None:
    """Coarse health of one activated batch."""
    try:
        health = asyncio.run(get_batch_health_status(batch_id))
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
        logger.warning("batch_health.not_found", batch_id=batch_id, error=str(e))
        raise typer.Exit(1) from e
    print_batch_health(health)


def global_health(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report as JSON"),
) -> None:
    """Health of every in_progress batch against one stock snapshot."""
    report = asyncio.run(get_global_batch_health())
    if not report.batches and not report.failures:
        console.print("[dim]No active batches.[/dim]")
        return

    table = Table(title="Active batches")
    table.add_column("Batch", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Cars left", justify="right")
    table.add_column("Can produce", justify="right")
    table.add_column("Blocked", justify="right")
    for batch_id, h in report.batches.items():
        table.add_row(
            batch_id, styled(h.status), str(h.cars_remaining), str(h.can_produce_cars), str(len(h.blocked_components))
        )
    console.print(table)
    for failure in report.failures:
        console.print(f"[red]{failure.key}: {failure.error}[/red]")
    if output:
        console.print(f"[green]Wrote {write_json_result(report, 'global_health', output)}[/green]")


def gaps() -> None:
    """List (sku, location) keys whose raw count differs from the allocation total."""
    found = inventory_store.find_consistency_gaps()
    if not found:
        console.print("[green]Raw counts match allocations.[/green]")
        return
    table = Table(title="Consistency gaps")
    table.add_column("SKU", style="cyan")
    table.add_column("Location")
    table.add_column("Raw", justify="right")
    table.add_column("Allocated", justify="right")
    for g in found:
        table.add_row(g.sku, g.location, str(g.raw_amount), str(g.total_allocated))
    console.print(table)
