"""Outcome models for mutating operations: fan-out, zeroing, transfers, consumption, ingestion."""

from typing import Optional

from pydantic import BaseModel, Field


class TaskFailure(BaseModel):
    """One failed sub-task of a fan-out operation."""

    key: str
    error: str


class ZeroStockResult(BaseModel):
    records_affected: int = 0
    total_zeroed: int = 0
    failures: list[TaskFailure] = []


class TransferResult(BaseModel):
    sku: str
    batch_id: str
    from_location: str
    to_location: str
    requested: int
    moved: int


class ComponentConsumption(BaseModel):
    bom_code: str
    sku: str
    required: int
    consumed: int

    @property
    def shortfall(self) -> int:
        return max(0, self.required - self.consumed)


class ConsumptionReport(BaseModel):
    vin: str
    zone_id: str
    car_type: str
    components: list[ComponentConsumption] = []
    skipped_boms: list[str] = []

    def consumed_by_sku(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for c in self.components:
            totals[c.sku] = totals.get(c.sku, 0) + c.consumed
        return totals


class ImportStats(BaseModel):
    total_rows: int = 0
    skipped_rows: int = 0


class ImportResult(BaseModel):
    success: int = 0
    errors: list[str] = []
    stats: ImportStats = Field(default_factory=ImportStats)


class ConsistencyGap(BaseModel):
    """A (sku, location) whose Layer 1 amount differs from its Layer 2 total."""

    sku: str
    location: str
    raw_amount: Optional[int] = None
    total_allocated: Optional[int] = None


class BatchProgress(BaseModel):
    batch_id: str
    total_allocated: int
