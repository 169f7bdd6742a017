"""Batch operations: activate, record zone completions, transfer and zero stock."""

import asyncio
from typing import Optional

import typer

from stockline.config import UNASSIGNED_BATCH_ID
from stockline.errors import NotFoundError
from stockline.models.results import TransferResult
from stockline.services import inventory_store, lifecycle, transfers
from stockline.utils.logger import bind_context, clear_context

from .shared import console, logger


def activate(
    batch_id: str = typer.Argument(..., help="Batch to start"),
    activated_by: str = typer.Option("cli", "--by", help="Recorded as activating user"),
) -> None:
    """Snapshot a batch's items as requirements and mark it in_progress."""
    log = logger.bind(command="activate", batch_id=batch_id)
    try:
        requirements = lifecycle.activate_batch(batch_id, activated_by=activated_by)
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
        log.warning("activate.not_found")
        raise typer.Exit(1) from e
    console.print(f"[green]Activated {batch_id} with {len(requirements)} tracked components.[/green]")


def complete(
    vin: str = typer.Argument(..., help="VIN of the car"),
    zone_id: str = typer.Argument(..., help="Production zone that finished"),
    car_type: str = typer.Argument(..., help="Car type code"),
    batch_id: Optional[str] = typer.Option(None, "--batch", "-b", help="Batch (looked up from VIN plans if omitted)"),
    completed_by: str = typer.Option("cli", "--by", help="Recorded on inventory transactions"),
) -> None:
    """Consume the zone's BOMs for a car and update its batch progress."""
    bind_context(command="complete", vin=vin, zone_id=zone_id)
    try:
        report = asyncio.run(lifecycle.handle_zone_completion(vin, zone_id, car_type, completed_by, batch_id=batch_id))
    finally:
        clear_context()
    for c in report.components:
        line = f"  {c.bom_code} {c.sku}: consumed {c.consumed}/{c.required}"
        console.print(f"[red]{line} (short {c.shortfall})[/red]" if c.shortfall else line)
    for bom_code in report.skipped_boms:
        console.print(f"  [yellow]Skipped missing BOM {bom_code}[/yellow]")
    if not report.components:
        console.print("[dim]Nothing consumed.[/dim]")


def zero_stock(
    batch_id: Optional[str] = typer.Option(None, "--batch", "-b", help="Zero one batch's slices"),
    unassigned: bool = typer.Option(False, "--unassigned", help="Zero the unassigned slices"),
    all_stock: bool = typer.Option(False, "--all", help="Zero every allocation record"),
    updated_by: str = typer.Option("cli", "--by", help="Recorded as updating user"),
) -> None:
    """Zero allocated stock for a batch, the unassigned slice, or everything."""
    log = logger.bind(command="zero-stock", batch_id=batch_id, unassigned=unassigned, all_stock=all_stock)
    chosen = sum([batch_id is not None, unassigned, all_stock])
    if chosen != 1:
        console.print("[red]Choose exactly one of --batch, --unassigned, --all.[/red]")
        raise typer.Exit(1)
    if all_stock:
        typer.confirm("Zero ALL stock records?", abort=True)
        result = asyncio.run(inventory_store.zero_all_stock(updated_by))
    elif unassigned:
        result = asyncio.run(inventory_store.zero_unassigned_stock(updated_by))
    else:
        result = asyncio.run(inventory_store.zero_stock_for_batch(batch_id, updated_by))

    console.print(f"[green]Zeroed {result.total_zeroed} units across {result.records_affected} records.[/green]")
    for failure in result.failures:
        console.print(f"  [red]{failure.key}: {failure.error}[/red]")
    log.info("zero_stock.complete", records_affected=result.records_affected, failed=len(result.failures))
    if result.failures:
        raise typer.Exit(1)


def transfer(
    sku: str = typer.Argument(..., help="Item to move"),
    amount: int = typer.Argument(..., help="Quantity to move"),
    from_location: str = typer.Argument(..., help="Source location"),
    to_location: str = typer.Argument(..., help="Destination location"),
    batch_id: Optional[str] = typer.Option(None, "--batch", "-b", help="Owning batch (unassigned stock if omitted)"),
    reverse: bool = typer.Option(False, "--reverse", help="Rectify: move the quantity back from destination to source"),
    performed_by: str = typer.Option("cli", "--by", help="Recorded as performing user"),
) -> None:
    """Move a batch's (or the unassigned) stock between locations."""
    log = logger.bind(command="transfer", sku=sku, batch_id=batch_id, reverse=reverse)
    try:
        if reverse:
            original = TransferResult(
                sku=sku,
                batch_id=batch_id or UNASSIGNED_BATCH_ID,
                from_location=from_location,
                to_location=to_location,
                requested=abs(amount),
                moved=abs(amount),
            )
            result = transfers.apply_rectification(original, performed_by=performed_by)
        else:
            result = transfers.apply_transfer(
                sku, amount, from_location, to_location, batch_id=batch_id, performed_by=performed_by
            )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        log.warning("transfer.rejected", error=str(e))
        raise typer.Exit(1) from e

    if result is None:
        console.print(f"[yellow]{sku} is a BOM code; nothing moved.[/yellow]")
        return
    console.print(
        f"Moved {result.moved}/{result.requested} of {result.sku} ({result.batch_id}) "
        f"{result.from_location} -> {result.to_location}"
    )
    if result.moved < result.requested:
        console.print(f"[yellow]Only {result.moved} available at {result.from_location}.[/yellow]")
