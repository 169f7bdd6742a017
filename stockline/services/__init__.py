"""Engine services: inventory store, health engines, consumption, lifecycle, ingestion."""

from stockline.services.batch_health import (
    get_batch_health_check,
    get_batch_health_status,
    get_global_batch_health,
)
from stockline.services.consumption import consume_bom_for_car_completion
from stockline.services.fanout import FanOutResult, run_independent
from stockline.services.requirements import RequirementResolver
from stockline.services.vin_health import compute_batch_health_by_vin

__all__ = [
    "FanOutResult",
    "RequirementResolver",
    "compute_batch_health_by_vin",
    "consume_bom_for_car_completion",
    "get_batch_health_check",
    "get_batch_health_status",
    "get_global_batch_health",
    "run_independent",
]
