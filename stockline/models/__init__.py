"""Pydantic models for records, reports and operation results."""

from stockline.models.data import (
    BatchAllocationRecord,
    BatchItem,
    BatchRecord,
    BatchRequirementRecord,
    BomComponent,
    BomRecord,
    InventoryTransactionRecord,
    RawInventoryRecord,
    VinPlanRecord,
    ZoneBomMappingRecord,
)
from stockline.models.reports import (
    BatchHealthCheck,
    BatchHealthStatus,
    BatchVinHealthReport,
    BlockedComponent,
    ExcessComponent,
    GlobalBatchHealthReport,
    MissingComponent,
    ShortageTotal,
    VinHealthResult,
    VinHealthSummary,
)
from stockline.models.results import (
    BatchProgress,
    ComponentConsumption,
    ConsistencyGap,
    ConsumptionReport,
    ImportResult,
    ImportStats,
    TaskFailure,
    TransferResult,
    ZeroStockResult,
)

__all__ = [
    "BatchAllocationRecord",
    "BatchItem",
    "BatchRecord",
    "BatchRequirementRecord",
    "BomComponent",
    "BomRecord",
    "InventoryTransactionRecord",
    "RawInventoryRecord",
    "VinPlanRecord",
    "ZoneBomMappingRecord",
    "BatchHealthCheck",
    "BatchHealthStatus",
    "BatchVinHealthReport",
    "BlockedComponent",
    "ExcessComponent",
    "GlobalBatchHealthReport",
    "MissingComponent",
    "ShortageTotal",
    "VinHealthResult",
    "VinHealthSummary",
    "BatchProgress",
    "ComponentConsumption",
    "ConsistencyGap",
    "ConsumptionReport",
    "ImportResult",
    "ImportStats",
    "TaskFailure",
    "TransferResult",
    "ZeroStockResult",
]
