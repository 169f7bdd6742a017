"""Batch lifecycle: create, activate, record completions, delete."""

from typing import Any, Iterable, Optional

from stockline.db.models.production import BATCH_STATUS_PLANNING
from stockline.db.repositories import batch_repo
from stockline.errors import BatchNotFoundError
from stockline.models.data import BatchRecord, BatchRequirementRecord
from stockline.models.results import ConsumptionReport
from stockline.services.consumption import consume_bom_for_car_completion
from stockline.services.inventory_store import zero_stock_for_batch
from stockline.utils.logger import get_logger

logger = get_logger("stockline.services.lifecycle")

get_batch = batch_repo.get_batch
list_batches = batch_repo.list_batches
list_active_batch_ids = batch_repo.list_active_batch_ids


def create_batch(
    batch_id: str,
    name: Optional[str] = None,
    car_type: Optional[str] = None,
    items: Iterable[dict[str, Any]] = (),
    car_vins: Iterable[str] = (),
    status: str = BATCH_STATUS_PLANNING,
    created_by: Optional[str] = None,
) -> BatchRecord:
    batch = batch_repo.create_batch(
        batch_id, name=name, car_type=car_type, items=items, status=status, car_vins=car_vins
    )
    logger.info(
        "batch.created",
        batch_id=batch_id,
        status=batch.status,
        total_cars=batch.total_cars,
        items=len(batch.items),
        created_by=created_by,
    )
    return batch


def set_batch_status(batch_id: str, status: str) -> BatchRecord:
    batch = batch_repo.set_batch_status(batch_id, status)
    logger.info("batch.status_changed", batch_id=batch_id, status=status)
    return batch


def activate_batch(batch_id: str, activated_by: Optional[str] = None) -> list[BatchRequirementRecord]:
    """Snapshot the batch items as requirement rows and move the batch to in_progress.

    Re-activating replaces the previous snapshot, so progress restarts from zero.
    """
    requirements = batch_repo.activate_batch(batch_id)
    logger.info(
        "batch.activated",
        batch_id=batch_id,
        requirements=len(requirements),
        activated_by=activated_by,
    )
    return requirements


def record_car_completion(
    batch_id: str,
    vin: str,
    consumed_components: dict[str, int],
) -> list[BatchRequirementRecord]:
    """Apply one finished car's consumption to the batch's requirement rows."""
    updated = batch_repo.apply_car_completion(batch_id, consumed_components)
    untracked = set(consumed_components) - {r.sku for r in updated}
    if untracked:
        logger.warning("batch.completion.untracked_skus", batch_id=batch_id, vin=vin, skus=sorted(untracked))
    logger.info("batch.completion.recorded", batch_id=batch_id, vin=vin, updated=len(updated))
    return updated


async def handle_zone_completion(
    vin: str,
    zone_id: str,
    car_type: str,
    completed_by: str,
    batch_id: Optional[str] = None,
) -> ConsumptionReport:
    """Entry point for a car finishing a production zone.

    Consumes the zone's BOMs from raw stock, then records the consumption
    against the VIN's batch (looked up from the VIN plan when not given).
    """
    report = await consume_bom_for_car_completion(vin, zone_id, car_type, completed_by)

    batch_id = batch_id or batch_repo.find_batch_for_vin(vin)
    consumed = {sku: qty for sku, qty in report.consumed_by_sku().items() if qty > 0}
    if batch_id is None:
        logger.warning("batch.completion.no_batch", vin=report.vin, zone_id=zone_id)
    elif consumed:
        record_car_completion(batch_id, report.vin, consumed)
    return report


async def delete_batch(batch_id: str, deleted_by: str) -> dict[str, int]:
    """Delete the batch with its requirement, VIN plan and receipt rows, then zero its stock slices."""
    if batch_repo.get_batch(batch_id) is None:
        raise BatchNotFoundError(batch_id)
    counts = batch_repo.delete_batch_records(batch_id)
    zeroed = await zero_stock_for_batch(batch_id, updated_by=deleted_by)
    counts["allocation_records"] = zeroed.records_affected
    counts["zero_failures"] = len(zeroed.failures)
    logger.warning("batch.deleted", batch_id=batch_id, deleted_by=deleted_by, **counts)
    return counts
