"""Manual transfers: move a batch's (or the unassigned) slice between locations."""

from typing import Optional

from stockline.config import UNASSIGNED_BATCH_ID
from stockline.db.repositories import inventory_repo
from stockline.models.results import TransferResult
from stockline.utils.logger import get_logger

logger = get_logger("stockline.services.transfers")


def apply_transfer(
    sku: str,
    amount: int,
    from_location: str,
    to_location: str,
    batch_id: Optional[str] = None,
    performed_by: str = "system",
) -> Optional[TransferResult]:
    """Move min(|amount|, available) of the owning slice from source to destination.

    Both ends are synced, so Layer 1 follows. BOM codes are not stock and are
    ignored (returns None).
    """
    if not to_location:
        raise ValueError("Destination location is required for transfer")
    if sku.startswith("BOM"):
        logger.warning("transfer.bom_ignored", sku=sku)
        return None

    owner = batch_id or UNASSIGNED_BATCH_ID
    requested = abs(amount)
    existing = inventory_repo.get_batch_allocation(sku, from_location)
    available = existing.allocations.get(owner, 0) if existing is not None else 0
    move_qty = min(requested, available)

    log = logger.bind(sku=sku, batch_id=owner, from_location=from_location, to_location=to_location)
    if move_qty <= 0:
        log.warning("transfer.nothing_to_move", requested=requested, available=available)
        return TransferResult(
            sku=sku,
            batch_id=owner,
            from_location=from_location,
            to_location=to_location,
            requested=requested,
            moved=0,
        )

    moved = inventory_repo.remove_from_batch_allocation(sku, from_location, owner, move_qty)
    if moved > 0:
        inventory_repo.add_to_batch_allocation(sku, to_location, owner, moved)
    log.info("transfer.applied", requested=requested, moved=moved, performed_by=performed_by)
    return TransferResult(
        sku=sku,
        batch_id=owner,
        from_location=from_location,
        to_location=to_location,
        requested=requested,
        moved=moved,
    )


def apply_rectification(original: TransferResult, performed_by: str = "system") -> Optional[TransferResult]:
    """Reverse a previous transfer: move what it moved back to its source."""
    batch_id = None if original.batch_id == UNASSIGNED_BATCH_ID else original.batch_id
    return apply_transfer(
        sku=original.sku,
        amount=original.moved,
        from_location=original.to_location,
        to_location=original.from_location,
        batch_id=batch_id,
        performed_by=performed_by,
    )
