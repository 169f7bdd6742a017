"""Health report models consumed by the reporting UI."""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from stockline.models.results import TaskFailure

HealthStatus = Literal["healthy", "warning", "critical"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MissingComponent(BaseModel):
    """A SKU a blocked VIN could not satisfy."""

    sku: str
    required: int
    available: int
    shortfall: int


class VinHealthResult(BaseModel):
    vin: str
    car_type: str
    status: Literal["ready", "blocked"]
    missing: list[MissingComponent] = []


class ShortageTotal(BaseModel):
    sku: str
    total_shortfall: int


class VinHealthSummary(BaseModel):
    batch_id: str
    total_vins: int
    ready_vins: int
    blocked_vins: int
    top_shortages: list[ShortageTotal] = []
    checked_at: datetime = Field(default_factory=_now)


class BatchVinHealthReport(BaseModel):
    summary: VinHealthSummary
    results: list[VinHealthResult] = []


class BlockedComponent(BaseModel):
    sku: str
    name: Optional[str] = None
    needed: int
    available: int
    shortfall: int


class ExcessComponent(BaseModel):
    sku: str
    name: Optional[str] = None
    excess: int


class BatchHealthStatus(BaseModel):
    """Coarse per-batch status from the tracked requirement snapshot."""

    batch_id: str
    status: HealthStatus
    cars_remaining: int
    total_cars: int
    can_produce_cars: int
    blocked_components: list[BlockedComponent] = []
    excess_components: list[ExcessComponent] = []
    checked_at: datetime = Field(default_factory=_now)


class GlobalBatchHealthReport(BaseModel):
    """Per-batch statuses for every in_progress batch, keyed by batch id."""

    batches: dict[str, BatchHealthStatus] = {}
    failures: list[TaskFailure] = []
    checked_at: datetime = Field(default_factory=_now)

    def count(self, status: HealthStatus) -> int:
        return sum(1 for h in self.batches.values() if h.status == status)


class BatchHealthCheck(BaseModel):
    """Legacy check from declared batch items against the full batch size."""

    batch_id: str
    health_status: HealthStatus
    available_components: int
    missing_components: list[BlockedComponent] = []
    excess_components: list[ExcessComponent] = []
    checked_at: datetime = Field(default_factory=_now)
    checked_by: Optional[str] = None
