"""Exception types raised by the allocation and health engine."""


class StocklineError(Exception):
    """Base class for engine errors."""


class NotFoundError(StocklineError):
    """A referenced record does not exist; the operation aborts."""


class BatchNotFoundError(NotFoundError):
    def __init__(self, batch_id: str):
        super().__init__(f"Batch {batch_id} not found")
        self.batch_id = batch_id


class BomNotFoundError(NotFoundError):
    def __init__(self, bom_code: str):
        super().__init__(f"BOM {bom_code} not found")
        self.bom_code = bom_code


class RequirementsNotFoundError(NotFoundError):
    def __init__(self, batch_id: str):
        super().__init__(f"No requirements found for batch {batch_id}. Batch may not be activated.")
        self.batch_id = batch_id


class InsufficientAllocationError(StocklineError):
    """Strict removal asked for more than the batch slice holds."""

    def __init__(self, sku: str, location: str, batch_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient allocation for {batch_id} at {sku}#{location}: "
            f"requested {requested}, available {available}"
        )
        self.sku = sku
        self.location = location
        self.batch_id = batch_id
        self.requested = requested
        self.available = available


class NegativeInventoryError(StocklineError):
    """A raw count adjustment would drive a location below zero."""

    def __init__(self, sku: str, location: str, current: int, delta: int):
        super().__init__(
            f"Cannot create negative inventory for {sku} at {location}. "
            f"Current: {current}, Change: {delta}, Result would be: {current + delta}"
        )
        self.sku = sku
        self.location = location
        self.current = current
        self.delta = delta


class IngestionError(StocklineError):
    """An uploaded file cannot be processed at all (e.g. missing columns)."""
