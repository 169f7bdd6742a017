"""Two-layer inventory store.

Layer 1 holds the raw count per (sku, location); Layer 2 holds the same
quantity broken down by owning batch. Allocation writes derive Layer 1 from the
Layer 2 total inside the same transaction unless the caller passes
``sync=False``. Stock that belongs to no batch lives in the UNASSIGNED slice so
that derivation keeps it.

Bulk zeroing fans out one task per allocation record; partial failure is
reported, not rolled back.
"""

from typing import Optional

from stockline.config import UNASSIGNED_BATCH_ID
from stockline.db.repositories import inventory_repo
from stockline.db.repositories.inventory_repo import (
    add_to_batch_allocation,
    adjust_raw_count,
    available_by_sku,
    get_batch_allocation,
    get_raw_records,
    list_batch_allocations,
    record_key,
    remove_from_batch_allocation,
    set_batch_allocation,
    set_raw_count,
    sync_expected_from_batch_allocations,
)
from stockline.models.data import BatchAllocationRecord
from stockline.models.results import BatchProgress, ConsistencyGap, ZeroStockResult
from stockline.services.fanout import run_independent
from stockline.utils.logger import get_logger

logger = get_logger("stockline.services.inventory_store")

__all__ = [
    "add_to_batch_allocation",
    "add_unassigned_stock",
    "adjust_raw_count",
    "available_by_sku",
    "batch_progress",
    "find_consistency_gaps",
    "get_batch_allocation",
    "get_raw_records",
    "list_batch_allocations",
    "remove_from_batch_allocation",
    "remove_from_batch_allocation_strict",
    "set_batch_allocation",
    "set_raw_count",
    "sync_expected_from_batch_allocations",
    "zero_all_stock",
    "zero_stock_for_batch",
    "zero_unassigned_stock",
]


def remove_from_batch_allocation_strict(
    sku: str,
    location: str,
    batch_id: str,
    quantity: int,
    sync: bool = True,
) -> int:
    """Remove exactly quantity or raise InsufficientAllocationError."""
    return remove_from_batch_allocation(sku, location, batch_id, quantity, sync=sync, strict=True)


def add_unassigned_stock(sku: str, location: str, quantity: int) -> BatchAllocationRecord:
    """Record stock owned by no batch."""
    return add_to_batch_allocation(sku, location, UNASSIGNED_BATCH_ID, quantity)


async def _zero_slices(batch_id: str, operation: str, updated_by: str) -> ZeroStockResult:
    records = list_batch_allocations(batch_id=batch_id)
    tasks = {
        r.key: (lambda r=r: inventory_repo.zero_slice(r.sku, r.location, batch_id))
        for r in records
    }
    outcome = await run_independent(tasks, operation=operation)
    removed = [qty for qty in outcome.results.values() if qty > 0]
    result = ZeroStockResult(
        records_affected=len(removed),
        total_zeroed=sum(removed),
        failures=outcome.failures,
    )
    logger.info(
        f"inventory.{operation}",
        batch_id=batch_id,
        records_affected=result.records_affected,
        total_zeroed=result.total_zeroed,
        failed=len(result.failures),
        updated_by=updated_by,
    )
    return result


async def zero_stock_for_batch(batch_id: str, updated_by: str) -> ZeroStockResult:
    """Remove batch_id from every allocation map and subtract it from Layer 1."""
    return await _zero_slices(batch_id, "zero_batch", updated_by)


async def zero_unassigned_stock(updated_by: str) -> ZeroStockResult:
    """Remove the UNASSIGNED slice everywhere and subtract it from Layer 1."""
    return await _zero_slices(UNASSIGNED_BATCH_ID, "zero_unassigned", updated_by)


async def zero_all_stock(updated_by: str) -> ZeroStockResult:
    """Empty every allocation record and set the matching Layer 1 rows to zero."""
    records = list_batch_allocations()
    tasks = {
        r.key: (lambda r=r: inventory_repo.zero_record(r.sku, r.location))
        for r in records
    }
    outcome = await run_independent(tasks, operation="zero_all")
    result = ZeroStockResult(
        records_affected=outcome.succeeded,
        total_zeroed=sum(outcome.results.values()),
        failures=outcome.failures,
    )
    logger.warning(
        "inventory.zero_all",
        records_affected=result.records_affected,
        total_zeroed=result.total_zeroed,
        failed=len(result.failures),
        updated_by=updated_by,
    )
    return result


def find_consistency_gaps() -> list[ConsistencyGap]:
    """Keys whose Layer 1 amount disagrees with the Layer 2 total. Reported only, never repaired."""
    raw = {record_key(r.sku, r.location): r for r in get_raw_records()}
    allocated = {r.key: r for r in list_batch_allocations()}
    gaps = []
    for key in sorted(set(raw) | set(allocated)):
        r = raw.get(key)
        a = allocated.get(key)
        raw_amount: Optional[int] = r.amount if r is not None else None
        total: Optional[int] = a.total_allocated if a is not None else None
        if (raw_amount or 0) != (total or 0):
            sku, location = (r.sku, r.location) if r is not None else (a.sku, a.location)
            gaps.append(ConsistencyGap(sku=sku, location=location, raw_amount=raw_amount, total_allocated=total))
    if gaps:
        logger.warning("inventory.consistency_gaps", count=len(gaps))
    return gaps


def batch_progress() -> list[BatchProgress]:
    """Total allocated per batch across all records, UNASSIGNED excluded."""
    totals: dict[str, int] = {}
    for record in list_batch_allocations():
        for batch_id, amount in record.allocations.items():
            if batch_id != UNASSIGNED_BATCH_ID:
                totals[batch_id] = totals.get(batch_id, 0) + amount
    return [BatchProgress(batch_id=b, total_allocated=t) for b, t in sorted(totals.items())]
