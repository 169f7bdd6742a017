"""Event routes for the production-zone event source."""

from typing import Any

from fastapi import APIRouter

from stockline.api.models import ZoneCompletionEvent
from stockline.services import lifecycle
from stockline.utils.logger import get_logger

logger = get_logger("stockline.api.events")

router = APIRouter(prefix="/events", tags=["events"])


@router.post("/zone-completion")
async def zone_completion(event: ZoneCompletionEvent) -> dict[str, Any]:
    """Consume the zone's BOMs for the car and update its batch progress."""
    logger.info("events.zone_completion.received", vin=event.vin, zone_id=event.zone_id, car_type=event.car_type)
    report = await lifecycle.handle_zone_completion(
        vin=event.vin,
        zone_id=event.zone_id,
        car_type=event.car_type,
        completed_by=event.completed_by,
        batch_id=event.batch_id,
    )
    return {
        **report.model_dump(),
        "consumed": report.consumed_by_sku(),
        "shortfalls": {c.sku: c.shortfall for c in report.components if c.shortfall},
    }
