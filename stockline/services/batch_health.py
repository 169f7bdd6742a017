"""Coarse batch health from tracked requirements, per batch and across active batches."""

from typing import Optional

from opentelemetry.trace import SpanKind

from stockline.config import EXCESS_FACTOR, LOW_MARGIN_RATIO
from stockline.db.repositories import batch_repo, inventory_repo
from stockline.errors import BatchNotFoundError, RequirementsNotFoundError
from stockline.models.data import BatchRequirementRecord
from stockline.models.reports import (
    BatchHealthCheck,
    BatchHealthStatus,
    BlockedComponent,
    ExcessComponent,
    GlobalBatchHealthReport,
    HealthStatus,
)
from stockline.services.fanout import run_independent
from stockline.utils.logger import get_logger
from stockline.utils.tracing import get_tracer

logger = get_logger("stockline.services.batch_health")


def _classify(blocked: bool, low_margin: bool) -> HealthStatus:
    if blocked:
        return "critical"
    if low_margin:
        return "warning"
    return "healthy"


def evaluate_requirements(
    batch_id: str,
    requirements: list[BatchRequirementRecord],
    inventory: dict[str, int],
) -> BatchHealthStatus:
    """Compare each requirement's remaining need with available stock."""
    blocked: list[BlockedComponent] = []
    excess: list[ExcessComponent] = []
    low_margin = False
    can_produce: Optional[int] = None

    total_cars = max((r.total_cars for r in requirements), default=0)
    cars_done = max((r.cars_completed for r in requirements), default=0)
    cars_remaining = max(0, total_cars - cars_done)

    for req in requirements:
        if req.remaining <= 0:
            continue
        available = inventory.get(req.sku, 0)

        cars_left = req.total_cars - req.cars_completed
        if cars_left > 0:
            # floor(available / (remaining / cars_left)) without floats
            producible = (available * cars_left) // req.remaining
            can_produce = producible if can_produce is None else min(can_produce, producible)

        if available < req.remaining:
            blocked.append(
                BlockedComponent(
                    sku=req.sku,
                    name=req.name,
                    needed=req.remaining,
                    available=available,
                    shortfall=req.remaining - available,
                )
            )
        elif available - req.remaining < LOW_MARGIN_RATIO * req.remaining:
            low_margin = True

        if available > req.remaining * EXCESS_FACTOR:
            excess.append(ExcessComponent(sku=req.sku, name=req.name, excess=available - req.remaining))

    if can_produce is None:
        can_produce = cars_remaining

    return BatchHealthStatus(
        batch_id=batch_id,
        status=_classify(bool(blocked), low_margin),
        cars_remaining=cars_remaining,
        total_cars=total_cars,
        can_produce_cars=max(0, can_produce),
        blocked_components=blocked,
        excess_components=excess,
    )


def _batch_health(batch_id: str, inventory: dict[str, int]) -> BatchHealthStatus:
    requirements = batch_repo.get_requirements(batch_id)
    if not requirements:
        raise RequirementsNotFoundError(batch_id)
    return evaluate_requirements(batch_id, requirements, inventory)


async def get_batch_health_status(
    batch_id: str,
    inventory: Optional[dict[str, int]] = None,
) -> BatchHealthStatus:
    """Health of one activated batch against current Layer 1 stock (or the given snapshot)."""
    tracer = get_tracer()
    with tracer.start_as_current_span("batch_health", kind=SpanKind.INTERNAL, attributes={"batch.id": batch_id}):
        if inventory is None:
            inventory = inventory_repo.available_by_sku()
        status = _batch_health(batch_id, inventory)
        logger.info(
            "batch_health.complete",
            batch_id=batch_id,
            status=status.status,
            blocked=len(status.blocked_components),
            can_produce_cars=status.can_produce_cars,
        )
        return status


async def get_global_batch_health() -> GlobalBatchHealthReport:
    """Health for every in_progress batch against one shared stock snapshot.

    Batches are evaluated independently; no batch gets priority over another.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span("global_batch_health", kind=SpanKind.INTERNAL) as span:
        batch_ids = batch_repo.list_active_batch_ids()
        if not batch_ids:
            logger.info("global_health.no_active_batches")
            return GlobalBatchHealthReport()

        inventory = inventory_repo.available_by_sku()
        tasks = {b: (lambda b=b: _batch_health(b, inventory)) for b in batch_ids}
        outcome = await run_independent(tasks, operation="global_health")

        report = GlobalBatchHealthReport(
            batches={b: outcome.results[b] for b in batch_ids if b in outcome.results},
            failures=outcome.failures,
        )
        span.set_attribute("global_health.batches", len(batch_ids))
        logger.info(
            "global_health.complete",
            total_batches=len(batch_ids),
            healthy=report.count("healthy"),
            warning=report.count("warning"),
            critical=report.count("critical"),
            failed=len(report.failures),
        )
        return report


async def get_batch_health_check(batch_id: str, checked_by: Optional[str] = None) -> BatchHealthCheck:
    """Legacy check: declared per-car item quantities times the full batch size."""
    batch = batch_repo.get_batch(batch_id)
    if batch is None:
        raise BatchNotFoundError(batch_id)
    inventory = inventory_repo.available_by_sku()

    missing: list[BlockedComponent] = []
    excess: list[ExcessComponent] = []
    producible: Optional[int] = None
    for item in batch.items:
        if item.quantity <= 0:
            continue
        available = inventory.get(item.sku, 0)
        needed = item.quantity * batch.total_cars
        cars = available // item.quantity
        producible = cars if producible is None else min(producible, cars)
        if available < needed:
            missing.append(
                BlockedComponent(sku=item.sku, name=item.name, needed=needed, available=available, shortfall=needed - available)
            )
        if available > needed * EXCESS_FACTOR:
            excess.append(ExcessComponent(sku=item.sku, name=item.name, excess=available - needed))

    producible = producible or 0
    if producible >= batch.total_cars and producible > 0:
        status: HealthStatus = "healthy"
    elif producible > 0:
        status = "warning"
    else:
        status = "critical"

    check = BatchHealthCheck(
        batch_id=batch_id,
        health_status=status,
        available_components=producible,
        missing_components=missing,
        excess_components=excess,
        checked_by=checked_by,
    )
    logger.info("batch_health.legacy_check", batch_id=batch_id, status=status, producible=producible)
    return check
