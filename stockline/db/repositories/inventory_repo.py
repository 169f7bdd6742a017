"""Inventory repository: Layer 1 (raw counts) and Layer 2 (batch allocations) primitives.

Every function runs in its own session, so each read-modify-write is one
transaction for its (sku, location) key. Nothing here locks across keys.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockline.db import get_session
from stockline.db.models.inventory import BatchAllocation, ExpectedInventory, InventoryTransaction
from stockline.errors import InsufficientAllocationError, NegativeInventoryError
from stockline.models.data import BatchAllocationRecord, InventoryTransactionRecord, RawInventoryRecord
from stockline.utils.logger import get_logger

logger = get_logger("stockline.db.inventory_repo")

SYSTEM_SYNC = "SYSTEM_SYNC"


def record_key(sku: str, location: str) -> str:
    return f"{sku}#{location}"


def _total(allocations: dict[str, int]) -> int:
    return sum(allocations.values())


def _get_allocation(session: Session, sku: str, location: str) -> Optional[BatchAllocation]:
    q = select(BatchAllocation).where(BatchAllocation.sku == sku).where(BatchAllocation.location == location)
    return session.scalars(q).first()


def _get_raw(session: Session, sku: str, location: str) -> Optional[ExpectedInventory]:
    q = select(ExpectedInventory).where(ExpectedInventory.sku == sku).where(ExpectedInventory.location == location)
    return session.scalars(q).first()


def _write_allocations(row: BatchAllocation, allocations: dict[str, int]) -> None:
    """Replace the map and recompute the total from scratch."""
    row.allocations = allocations
    row.total_allocated = _total(allocations)


def _write_raw(
    session: Session,
    sku: str,
    location: str,
    amount: int,
    counted_by: Optional[str],
    item_name: Optional[str] = None,
) -> int:
    """Upsert a Layer 1 row; returns the previous amount (0 when created)."""
    row = _get_raw(session, sku, location)
    if row is None:
        session.add(
            ExpectedInventory(sku=sku, location=location, amount=amount, counted_by=counted_by, item_name=item_name or sku)
        )
        return 0
    previous = row.amount
    row.amount = amount
    row.counted_by = counted_by
    if item_name:
        row.item_name = item_name
    return previous


# --- Layer 2 -----------------------------------------------------------------


def get_batch_allocation(sku: str, location: str) -> Optional[BatchAllocationRecord]:
    with get_session() as session:
        row = _get_allocation(session, sku, location)
        return BatchAllocationRecord.model_validate(row) if row is not None else None


def list_batch_allocations(batch_id: Optional[str] = None) -> list[BatchAllocationRecord]:
    """All allocation records, or only those holding a positive slice for batch_id."""
    with get_session() as session:
        rows = session.scalars(select(BatchAllocation).order_by(BatchAllocation.id)).all()
        records = [BatchAllocationRecord.model_validate(r) for r in rows]
    if batch_id is None:
        return records
    return [r for r in records if r.allocations.get(batch_id, 0) > 0]


def add_to_batch_allocation(
    sku: str,
    location: str,
    batch_id: str,
    quantity: int,
    sync: bool = True,
) -> BatchAllocationRecord:
    """Increment one batch slice. Additions always succeed; quantity must be positive."""
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")
    with get_session() as session:
        row = _get_allocation(session, sku, location)
        if row is None:
            row = BatchAllocation(sku=sku, location=location)
            session.add(row)
            _write_allocations(row, {batch_id: quantity})
            logger.info("inventory.allocation.created", sku=sku, location=location, batch_id=batch_id, quantity=quantity)
        else:
            allocations = dict(row.allocations or {})
            allocations[batch_id] = allocations.get(batch_id, 0) + quantity
            _write_allocations(row, allocations)
            logger.info(
                "inventory.allocation.added",
                sku=sku,
                location=location,
                batch_id=batch_id,
                added=quantity,
                new_amount=allocations[batch_id],
                total_allocated=row.total_allocated,
            )
        if sync:
            _write_raw(session, sku, location, row.total_allocated, SYSTEM_SYNC)
        session.flush()
        return BatchAllocationRecord.model_validate(row)


def remove_from_batch_allocation(
    sku: str,
    location: str,
    batch_id: str,
    quantity: int,
    sync: bool = True,
    strict: bool = False,
) -> int:
    """Decrement one batch slice; returns the quantity actually removed.

    Clamped by default: asking for more than the slice holds removes what is
    there. With strict=True the shortfall raises InsufficientAllocationError and
    nothing changes. A slice that reaches zero is deleted from the map.
    """
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")
    with get_session() as session:
        row = _get_allocation(session, sku, location)
        if row is None:
            if strict:
                raise InsufficientAllocationError(sku, location, batch_id, quantity, 0)
            logger.warning("inventory.allocation.missing", sku=sku, location=location, batch_id=batch_id)
            return 0
        allocations = dict(row.allocations or {})
        current = allocations.get(batch_id, 0)
        if current < quantity:
            if strict:
                raise InsufficientAllocationError(sku, location, batch_id, quantity, current)
            logger.warning(
                "inventory.allocation.clamped",
                sku=sku,
                location=location,
                batch_id=batch_id,
                requested=quantity,
                available=current,
            )
            quantity = current
        remaining = current - quantity
        if remaining <= 0:
            allocations.pop(batch_id, None)
        else:
            allocations[batch_id] = remaining
        _write_allocations(row, allocations)
        if sync:
            _write_raw(session, sku, location, row.total_allocated, SYSTEM_SYNC)
        logger.info(
            "inventory.allocation.removed",
            sku=sku,
            location=location,
            batch_id=batch_id,
            removed=quantity,
            new_amount=max(remaining, 0),
            total_allocated=row.total_allocated,
        )
        return quantity


def set_batch_allocation(
    sku: str,
    location: str,
    batch_id: str,
    quantity: int,
    updated_by: str,
    sync: bool = True,
) -> Optional[BatchAllocationRecord]:
    """Overwrite one batch slice (floored at 0; 0 removes it). Missing record is a logged no-op."""
    with get_session() as session:
        row = _get_allocation(session, sku, location)
        if row is None:
            logger.warning("inventory.allocation.update_missing", sku=sku, location=location, batch_id=batch_id)
            return None
        allocations = dict(row.allocations or {})
        if quantity > 0:
            allocations[batch_id] = quantity
        else:
            allocations.pop(batch_id, None)
        _write_allocations(row, allocations)
        if sync:
            _write_raw(session, sku, location, row.total_allocated, SYSTEM_SYNC)
        session.flush()
        logger.info(
            "inventory.allocation.set",
            sku=sku,
            location=location,
            batch_id=batch_id,
            quantity=max(quantity, 0),
            total_allocated=row.total_allocated,
            updated_by=updated_by,
        )
        return BatchAllocationRecord.model_validate(row)


def zero_slice(sku: str, location: str, batch_id: str) -> int:
    """Remove batch_id's slice and subtract it from Layer 1 (floored at 0). Returns the amount removed."""
    with get_session() as session:
        row = _get_allocation(session, sku, location)
        if row is None:
            return 0
        allocations = dict(row.allocations or {})
        removed = allocations.pop(batch_id, 0)
        if removed <= 0:
            return 0
        _write_allocations(row, allocations)
        raw = _get_raw(session, sku, location)
        if raw is not None:
            previous = raw.amount
            raw.amount = max(0, previous - removed)
            logger.debug("inventory.raw.reduced", sku=sku, location=location, previous=previous, new_amount=raw.amount)
        return removed


def zero_record(sku: str, location: str) -> int:
    """Empty the allocation map and set Layer 1 to 0. Returns the total that was allocated."""
    with get_session() as session:
        row = _get_allocation(session, sku, location)
        if row is None:
            return 0
        zeroed = row.total_allocated
        _write_allocations(row, {})
        raw = _get_raw(session, sku, location)
        if raw is not None:
            raw.amount = 0
            logger.debug("inventory.raw.zeroed", sku=sku, location=location)
        return zeroed


# --- Layer 1 -----------------------------------------------------------------


def sync_expected_from_batch_allocations(sku: str, location: str, new_total: Optional[int] = None) -> int:
    """Overwrite the Layer 1 amount with new_total (default: the current Layer 2 total)."""
    with get_session() as session:
        if new_total is None:
            row = _get_allocation(session, sku, location)
            new_total = row.total_allocated if row is not None else 0
        previous = _write_raw(session, sku, location, new_total, SYSTEM_SYNC)
        logger.info("inventory.raw.synced", sku=sku, location=location, previous=previous, new_amount=new_total)
        return new_total


def set_raw_count(sku: str, location: str, amount: int, counted_by: str, item_name: Optional[str] = None) -> int:
    """Record a physical count. Returns the previous amount."""
    if amount < 0:
        raise NegativeInventoryError(sku, location, 0, amount)
    with get_session() as session:
        return _write_raw(session, sku, location, amount, counted_by, item_name)


def adjust_raw_count(
    sku: str,
    location: str,
    delta: int,
    counted_by: str,
    item_name: Optional[str] = None,
) -> tuple[int, int]:
    """Add delta to a Layer 1 count without touching Layer 2. Returns (previous, new)."""
    with get_session() as session:
        row = _get_raw(session, sku, location)
        previous = row.amount if row is not None else 0
        if previous + delta < 0:
            raise NegativeInventoryError(sku, location, previous, delta)
        _write_raw(session, sku, location, previous + delta, counted_by, item_name)
        return previous, previous + delta


def get_raw_records(sku: Optional[str] = None) -> list[RawInventoryRecord]:
    """Layer 1 rows in insertion order (the first-found order used for consumption)."""
    with get_session() as session:
        q = select(ExpectedInventory)
        if sku:
            q = q.where(ExpectedInventory.sku == sku)
        rows = session.scalars(q.order_by(ExpectedInventory.id)).all()
        return [RawInventoryRecord.model_validate(r) for r in rows]


def available_by_sku() -> dict[str, int]:
    """Layer 1 amounts summed across all locations."""
    totals: dict[str, int] = {}
    for record in get_raw_records():
        totals[record.sku] = totals.get(record.sku, 0) + (record.amount or 0)
    return totals


def consume_from_raw(
    sku: str,
    quantity: int,
    performed_by: str,
    reference: str,
    notes: str,
    transaction_prefix: str,
    item_name: Optional[str] = None,
) -> list[InventoryTransactionRecord]:
    """Consume up to quantity of sku from Layer 1 rows in first-found order.

    Writes one negative-amount transaction per partial consumption. Returns the
    transactions; their amounts sum to minus the quantity actually consumed.
    """
    with get_session() as session:
        rows = session.scalars(
            select(ExpectedInventory).where(ExpectedInventory.sku == sku).order_by(ExpectedInventory.id)
        ).all()
        consumed = 0
        transactions = []
        for row in rows:
            if consumed >= quantity:
                break
            available = row.amount or 0
            take = min(quantity - consumed, available)
            if take <= 0:
                continue
            tx = InventoryTransaction(
                transaction_id=f"{transaction_prefix}_{row.location}_{uuid.uuid4().hex[:12]}",
                sku=sku,
                item_name=item_name or row.item_name,
                amount=-take,
                previous_amount=available,
                new_amount=available - take,
                location=row.location,
                transaction_type="adjustment",
                status="completed",
                performed_by=performed_by,
                notes=notes,
                reference=reference,
            )
            session.add(tx)
            row.amount = available - take
            row.counted_by = f"bom.{performed_by}"
            consumed += take
            transactions.append(tx)
            logger.info("inventory.raw.consumed", sku=sku, location=row.location, quantity=take, reference=reference)
        session.flush()
        return [InventoryTransactionRecord.model_validate(t) for t in transactions]


def list_transactions(reference: Optional[str] = None) -> list[InventoryTransactionRecord]:
    with get_session() as session:
        q = select(InventoryTransaction)
        if reference:
            q = q.where(InventoryTransaction.reference == reference)
        rows = session.scalars(q.order_by(InventoryTransaction.id)).all()
        return [InventoryTransactionRecord.model_validate(r) for r in rows]
