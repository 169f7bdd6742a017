"""VIN-level build readiness for one batch.

Greedy, single pass over the batch's VIN plan in ingestion order against one
pool of Layer 1 stock summed across locations. A ready VIN deducts its full
requirement from the pool; a blocked VIN deducts nothing. The report is an
advisory snapshot: it takes no locks and reserves nothing.
"""

from typing import Optional

from opentelemetry.trace import SpanKind

from stockline.config import TOP_SHORTAGES_LIMIT
from stockline.db.repositories import batch_repo, inventory_repo
from stockline.errors import BatchNotFoundError
from stockline.models.reports import (
    BatchVinHealthReport,
    MissingComponent,
    ShortageTotal,
    VinHealthResult,
    VinHealthSummary,
)
from stockline.services.requirements import RequirementResolver
from stockline.utils.logger import get_logger
from stockline.utils.tracing import get_tracer

logger = get_logger("stockline.services.vin_health")


def top_shortages(totals: dict[str, int], limit: int = TOP_SHORTAGES_LIMIT) -> list[ShortageTotal]:
    """Largest aggregated shortfalls first; ties keep first-seen order."""
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return [ShortageTotal(sku=sku, total_shortfall=total) for sku, total in ranked[:limit]]


def allocate_vins(
    plans: list[tuple[str, str]],
    pool: dict[str, int],
    requirements_for,
) -> tuple[list[VinHealthResult], dict[str, int]]:
    """Run the greedy pass. Mutates pool; returns per-VIN results and shortfall totals per SKU."""
    results: list[VinHealthResult] = []
    shortage_totals: dict[str, int] = {}
    for vin, car_type in plans:
        required = requirements_for(car_type)
        missing = []
        for sku, qty in required.items():
            available = pool.get(sku, 0)
            if available < qty:
                missing.append(MissingComponent(sku=sku, required=qty, available=available, shortfall=qty - available))

        if not missing:
            for sku, qty in required.items():
                pool[sku] = max(0, pool.get(sku, 0) - qty)
            results.append(VinHealthResult(vin=vin, car_type=car_type, status="ready"))
            continue

        results.append(VinHealthResult(vin=vin, car_type=car_type, status="blocked", missing=missing))
        for m in missing:
            shortage_totals[m.sku] = shortage_totals.get(m.sku, 0) + m.shortfall
    return results, shortage_totals


async def compute_batch_health_by_vin(
    batch_id: str,
    resolver: Optional[RequirementResolver] = None,
) -> BatchVinHealthReport:
    """Which planned VINs of batch_id can be built now, and what blocks the rest."""
    log = logger.bind(batch_id=batch_id)
    tracer = get_tracer()
    with tracer.start_as_current_span("vin_health", kind=SpanKind.INTERNAL, attributes={"batch.id": batch_id}) as span:
        if batch_repo.get_batch(batch_id) is None:
            log.warning("vin_health.batch_missing")
            raise BatchNotFoundError(batch_id)

        plans = batch_repo.list_vin_plans(batch_id)
        pool = inventory_repo.available_by_sku()
        resolver = resolver or RequirementResolver()

        results, shortage_totals = allocate_vins(
            [(p.vin, p.car_type) for p in plans],
            pool,
            resolver.requirements_for,
        )
        ready = sum(1 for r in results if r.status == "ready")
        summary = VinHealthSummary(
            batch_id=batch_id,
            total_vins=len(plans),
            ready_vins=ready,
            blocked_vins=len(plans) - ready,
            top_shortages=top_shortages(shortage_totals),
        )
        span.set_attribute("vin_health.total_vins", summary.total_vins)
        span.set_attribute("vin_health.ready_vins", summary.ready_vins)
        log.info(
            "vin_health.complete",
            total_vins=summary.total_vins,
            ready_vins=summary.ready_vins,
            blocked_vins=summary.blocked_vins,
            short_skus=len(shortage_totals),
        )
        return BatchVinHealthReport(summary=summary, results=results)
