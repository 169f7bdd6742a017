"""Re-export all ORM models so Base.metadata has all tables."""

from stockline.db.models.catalog import Bom, CarType, Item, ZoneBomMapping
from stockline.db.models.inventory import BatchAllocation, ExpectedInventory, InventoryTransaction
from stockline.db.models.production import Batch, BatchReceipt, BatchRequirement, VinPlan

__all__ = [
    "Item",
    "Bom",
    "CarType",
    "ZoneBomMapping",
    "Batch",
    "VinPlan",
    "BatchRequirement",
    "BatchReceipt",
    "ExpectedInventory",
    "BatchAllocation",
    "InventoryTransaction",
]
