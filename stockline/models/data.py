"""Record models returned by repositories (detached from ORM sessions)."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class BomComponent(BaseModel):
    """One line of a bill of materials."""

    sku: str
    name: Optional[str] = None
    quantity: int


class BomRecord(_Record):
    bom_code: str
    name: Optional[str] = None
    components: list[BomComponent] = []


class ZoneBomMappingRecord(_Record):
    zone_id: str
    car_code: str
    bom_code: str
    consume_on_completion: bool = True


class BatchItem(BaseModel):
    """Declared packing-list requirement of a batch."""

    sku: str
    name: Optional[str] = None
    quantity: int


class BatchRecord(_Record):
    batch_id: str
    name: Optional[str] = None
    car_type: Optional[str] = None
    car_vins: list[str] = []
    items: list[BatchItem] = []
    total_cars: int = 0
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VinPlanRecord(_Record):
    batch_id: str
    vin: str
    car_type: str


class BatchRequirementRecord(_Record):
    batch_id: str
    sku: str
    name: Optional[str] = None
    total_needed: int
    consumed: int
    remaining: int
    cars_completed: int
    total_cars: int


class RawInventoryRecord(_Record):
    """Layer 1 row."""

    sku: str
    location: str
    amount: int
    item_name: Optional[str] = None
    counted_by: Optional[str] = None


class BatchAllocationRecord(_Record):
    """Layer 2 row."""

    sku: str
    location: str
    allocations: dict[str, int] = {}
    total_allocated: int = 0
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return f"{self.sku}#{self.location}"


class InventoryTransactionRecord(_Record):
    transaction_id: str
    sku: str
    amount: int
    previous_amount: int
    new_amount: int
    location: str
    transaction_type: str
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    reference: Optional[str] = None
