"""Batch repository: batches, VIN plans, receipts and requirement tracking rows."""

from typing import Any, Iterable, Optional

from sqlalchemy import delete, select

from stockline.config import ACTIVE_BATCH_STATUS
from stockline.db import get_session
from stockline.db.models.catalog import Item
from stockline.db.models.production import (
    BATCH_STATUS_PLANNING,
    Batch,
    BatchReceipt,
    BatchRequirement,
    VinPlan,
)
from stockline.errors import BatchNotFoundError
from stockline.models.data import BatchItem, BatchRecord, BatchRequirementRecord, VinPlanRecord
from stockline.utils.logger import get_logger

logger = get_logger("stockline.db.batch_repo")


def _merge_items(existing: Iterable[dict[str, Any]], items: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """One entry per SKU, quantities summed in first-seen order."""
    by_sku: dict[str, dict[str, Any]] = {}
    for item in [*existing, *items]:
        new = BatchItem.model_validate(item)
        if new.sku in by_sku:
            by_sku[new.sku]["quantity"] += new.quantity
        else:
            by_sku[new.sku] = new.model_dump()
    return list(by_sku.values())


def create_batch(
    batch_id: str,
    name: Optional[str] = None,
    car_type: Optional[str] = None,
    items: Iterable[dict[str, Any]] = (),
    status: str = BATCH_STATUS_PLANNING,
    car_vins: Iterable[str] = (),
) -> BatchRecord:
    """Create or overwrite a batch document. Repeated SKUs in items are summed."""
    parsed_items = _merge_items((), items)
    vins = list(dict.fromkeys(v.upper() for v in car_vins))
    with get_session() as session:
        row = session.scalars(select(Batch).where(Batch.batch_id == batch_id)).first()
        if row is None:
            row = Batch(batch_id=batch_id)
            session.add(row)
        row.name = name
        row.car_type = car_type
        row.items = parsed_items
        row.car_vins = vins
        row.total_cars = len(vins)
        row.status = status
        session.flush()
        return BatchRecord.model_validate(row)


def get_batch(batch_id: str) -> Optional[BatchRecord]:
    with get_session() as session:
        row = session.scalars(select(Batch).where(Batch.batch_id == batch_id)).first()
        return BatchRecord.model_validate(row) if row is not None else None


def list_batches(status: Optional[str] = None) -> list[BatchRecord]:
    with get_session() as session:
        q = select(Batch)
        if status:
            q = q.where(Batch.status == status)
        rows = session.scalars(q.order_by(Batch.batch_id)).all()
        return [BatchRecord.model_validate(r) for r in rows]


def list_active_batch_ids() -> list[str]:
    """Active batches are whatever is in_progress at read time (no cached registry)."""
    with get_session() as session:
        q = select(Batch.batch_id).where(Batch.status == ACTIVE_BATCH_STATUS).order_by(Batch.batch_id)
        return list(session.scalars(q).all())


def set_batch_status(batch_id: str, status: str) -> BatchRecord:
    with get_session() as session:
        row = session.scalars(select(Batch).where(Batch.batch_id == batch_id)).first()
        if row is None:
            raise BatchNotFoundError(batch_id)
        row.status = status
        session.flush()
        return BatchRecord.model_validate(row)


def add_vin_plan(batch_id: str, vin: str, car_type: str) -> None:
    with get_session() as session:
        session.add(VinPlan(batch_id=batch_id, vin=vin.upper(), car_type=car_type))


def list_vin_plans(batch_id: str) -> list[VinPlanRecord]:
    """VIN plan rows in ingestion order."""
    with get_session() as session:
        rows = session.scalars(select(VinPlan).where(VinPlan.batch_id == batch_id).order_by(VinPlan.id)).all()
        return [VinPlanRecord.model_validate(r) for r in rows]


def find_batch_for_vin(vin: str) -> Optional[str]:
    with get_session() as session:
        q = select(VinPlan.batch_id).where(VinPlan.vin == vin.upper()).order_by(VinPlan.id)
        return session.scalars(q).first()


def merge_batch_vins(batch_id: str, vins: Iterable[str], car_type: Optional[str] = None) -> bool:
    """Union VINs into the batch and recount total_cars. Returns False if the batch is missing."""
    with get_session() as session:
        row = session.scalars(select(Batch).where(Batch.batch_id == batch_id)).first()
        if row is None:
            return False
        merged = list(dict.fromkeys([*(row.car_vins or []), *(v.upper() for v in vins)]))
        row.car_vins = merged
        row.total_cars = len(merged)
        row.car_type = row.car_type or car_type
        return True


def add_receipt(
    batch_id: str,
    sku: str,
    quantity: int,
    location: Optional[str] = None,
    box_id: Optional[str] = None,
    notes: Optional[str] = None,
    uploaded_by: Optional[str] = None,
) -> None:
    with get_session() as session:
        session.add(
            BatchReceipt(
                batch_id=batch_id,
                sku=sku,
                quantity=quantity,
                location=location,
                box_id=box_id,
                notes=notes,
                uploaded_by=uploaded_by,
            )
        )


def merge_batch_items(batch_id: str, items: Iterable[dict[str, Any]]) -> bool:
    """Add packing-list quantities into the batch's declared items (summed per SKU)."""
    with get_session() as session:
        row = session.scalars(select(Batch).where(Batch.batch_id == batch_id)).first()
        if row is None:
            return False
        row.items = _merge_items(row.items or [], items)
        return True


def get_requirements(batch_id: str) -> list[BatchRequirementRecord]:
    with get_session() as session:
        q = select(BatchRequirement).where(BatchRequirement.batch_id == batch_id).order_by(BatchRequirement.id)
        return [BatchRequirementRecord.model_validate(r) for r in session.scalars(q).all()]


def activate_batch(batch_id: str) -> list[BatchRequirementRecord]:
    """Replace the batch's requirement snapshot from its items and mark it in_progress, atomically."""
    with get_session() as session:
        batch = session.scalars(select(Batch).where(Batch.batch_id == batch_id)).first()
        if batch is None:
            raise BatchNotFoundError(batch_id)
        session.execute(delete(BatchRequirement).where(BatchRequirement.batch_id == batch_id))
        items = [BatchItem.model_validate(i) for i in _merge_items((), batch.items or [])]
        names = dict(
            session.execute(select(Item.sku, Item.name).where(Item.sku.in_([i.sku for i in items]))).all()
        )
        rows = []
        for item in items:
            row = BatchRequirement(
                batch_id=batch_id,
                sku=item.sku,
                name=names.get(item.sku, item.name),
                total_needed=item.quantity,
                consumed=0,
                remaining=item.quantity,
                cars_completed=0,
                total_cars=batch.total_cars,
            )
            session.add(row)
            rows.append(row)
        batch.status = ACTIVE_BATCH_STATUS
        session.flush()
        return [BatchRequirementRecord.model_validate(r) for r in rows]


def apply_car_completion(batch_id: str, consumed: dict[str, int]) -> list[BatchRequirementRecord]:
    """Add one completed car's consumption to the batch's requirement rows in one transaction."""
    with get_session() as session:
        q = (
            select(BatchRequirement)
            .where(BatchRequirement.batch_id == batch_id)
            .where(BatchRequirement.sku.in_(list(consumed)))
        )
        updated = []
        for req in session.scalars(q).all():
            req.consumed = req.consumed + consumed[req.sku]
            req.remaining = max(0, req.total_needed - req.consumed)
            req.cars_completed = min(req.total_cars, req.cars_completed + 1)
            updated.append(req)
            logger.debug(
                "batch.requirement.updated",
                batch_id=batch_id,
                sku=req.sku,
                consumed=req.consumed,
                total_needed=req.total_needed,
                remaining=req.remaining,
            )
        session.flush()
        return [BatchRequirementRecord.model_validate(r) for r in updated]


def delete_batch_records(batch_id: str) -> dict[str, int]:
    """Delete the batch and its requirement, VIN plan and receipt rows. Returns deleted counts."""
    with get_session() as session:
        batch = session.scalars(select(Batch).where(Batch.batch_id == batch_id)).first()
        if batch is None:
            raise BatchNotFoundError(batch_id)
        session.delete(batch)
        counts = {}
        for label, model in (
            ("requirements", BatchRequirement),
            ("vin_plans", VinPlan),
            ("receipts", BatchReceipt),
        ):
            result = session.execute(delete(model).where(model.batch_id == batch_id))
            counts[label] = result.rowcount or 0
        return counts
