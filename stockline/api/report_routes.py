"""Report routes for the reporting UI: batches, health and inventory views."""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query

from stockline.errors import BatchNotFoundError, NotFoundError
from stockline.models.reports import (
    BatchHealthCheck,
    BatchHealthStatus,
    BatchVinHealthReport,
    GlobalBatchHealthReport,
)
from stockline.services import inventory_store, lifecycle
from stockline.services.batch_health import (
    get_batch_health_check,
    get_batch_health_status,
    get_global_batch_health,
)
from stockline.services.vin_health import compute_batch_health_by_vin

router = APIRouter(tags=["reports"])


@router.get("/batches")
async def list_batches(status: Optional[str] = Query(None, description="Filter by batch status")) -> dict[str, Any]:
    batches = lifecycle.list_batches(status)
    return {"items": [b.model_dump(mode="json") for b in batches], "status": status}


@router.get("/batches/{batch_id}")
async def get_batch(batch_id: str) -> dict[str, Any]:
    batch = lifecycle.get_batch(batch_id)
    if batch is None:
        raise HTTPException(status_code=404, detail=str(BatchNotFoundError(batch_id)))
    return batch.model_dump(mode="json")


@router.get("/batches/{batch_id}/vin-health", response_model=BatchVinHealthReport)
async def batch_vin_health(batch_id: str) -> BatchVinHealthReport:
    """Per-VIN readiness in plan order."""
    try:
        return await compute_batch_health_by_vin(batch_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/batches/{batch_id}/health", response_model=BatchHealthStatus)
async def batch_health(batch_id: str) -> BatchHealthStatus:
    try:
        return await get_batch_health_status(batch_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/batches/{batch_id}/health-check", response_model=BatchHealthCheck)
async def batch_health_check(batch_id: str, checked_by: Optional[str] = None) -> BatchHealthCheck:
    try:
        return await get_batch_health_check(batch_id, checked_by=checked_by)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/health/global", response_model=GlobalBatchHealthReport)
async def global_health() -> GlobalBatchHealthReport:
    return await get_global_batch_health()


@router.get("/inventory/allocations")
async def allocations(batch_id: Optional[str] = Query(None, description="Only records holding this batch")) -> dict[str, Any]:
    records = inventory_store.list_batch_allocations(batch_id=batch_id)
    return {"items": [r.model_dump(mode="json") for r in records], "batch_id": batch_id}


@router.get("/inventory/raw")
async def raw_inventory(sku: Optional[str] = None) -> dict[str, Any]:
    records = inventory_store.get_raw_records(sku=sku)
    return {"items": [r.model_dump() for r in records], "sku": sku}


@router.get("/inventory/gaps")
async def consistency_gaps() -> dict[str, Any]:
    """Keys where the raw count and the allocation total disagree."""
    gaps = inventory_store.find_consistency_gaps()
    return {"items": [g.model_dump() for g in gaps], "count": len(gaps)}


@router.get("/inventory/progress")
async def batch_progress() -> dict[str, Any]:
    return {"items": [p.model_dump() for p in inventory_store.batch_progress()]}
