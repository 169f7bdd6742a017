"""Consume BOM components from Layer 1 when a car passes a production zone."""

from opentelemetry.trace import SpanKind

from stockline.db.repositories import catalog_repo, inventory_repo
from stockline.models.results import ComponentConsumption, ConsumptionReport
from stockline.utils.logger import get_logger
from stockline.utils.tracing import get_tracer

logger = get_logger("stockline.services.consumption")


async def consume_bom_for_car_completion(
    vin: str,
    zone_id: str,
    car_type: str,
    completed_by: str,
) -> ConsumptionReport:
    """Deduct every consuming BOM mapped to (zone_id, car_type) from raw stock.

    Records are drained in first-found order. A missing BOM skips its mapping
    and a shortfall is logged; neither stops the remaining components.
    """
    vin = vin.upper()
    log = logger.bind(vin=vin, zone_id=zone_id, car_type=car_type)
    report = ConsumptionReport(vin=vin, zone_id=zone_id, car_type=car_type)
    reference = f"CAR_{vin}_ZONE_{zone_id}"

    tracer = get_tracer()
    with tracer.start_as_current_span(
        "bom_consumption",
        kind=SpanKind.INTERNAL,
        attributes={"car.vin": vin, "zone.id": zone_id, "car.type": car_type},
    ) as span:
        mappings = [
            m for m in catalog_repo.list_zone_mappings(zone_id=zone_id, car_code=car_type) if m.consume_on_completion
        ]
        if not mappings:
            log.info("consumption.no_mappings")
            return report

        for mapping in mappings:
            bom = catalog_repo.get_bom(mapping.bom_code)
            if bom is None:
                log.error("consumption.bom_missing", bom_code=mapping.bom_code)
                report.skipped_boms.append(mapping.bom_code)
                continue

            for component in bom.components:
                transactions = inventory_repo.consume_from_raw(
                    sku=component.sku,
                    quantity=component.quantity,
                    performed_by=completed_by,
                    reference=reference,
                    notes=f"BOM consumption: {bom.bom_code} for car {vin} in zone {zone_id}",
                    transaction_prefix=f"BOM_{vin}_{component.sku}",
                    item_name=component.name,
                )
                consumed = -sum(t.amount for t in transactions)
                entry = ComponentConsumption(
                    bom_code=bom.bom_code,
                    sku=component.sku,
                    required=component.quantity,
                    consumed=consumed,
                )
                report.components.append(entry)
                if entry.shortfall:
                    log.warning(
                        "consumption.shortfall",
                        bom_code=bom.bom_code,
                        sku=component.sku,
                        required=component.quantity,
                        consumed=consumed,
                        shortfall=entry.shortfall,
                    )

        span.set_attribute("consumption.components", len(report.components))
        log.info(
            "consumption.complete",
            components=len(report.components),
            consumed=sum(c.consumed for c in report.components),
            short_components=sum(1 for c in report.components if c.shortfall),
            skipped_boms=len(report.skipped_boms),
            completed_by=completed_by,
        )
        return report
