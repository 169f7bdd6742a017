"""ORM models for the two inventory layers and the transaction audit trail."""

from datetime import datetime

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stockline.db.base import Base, TimestampMixin, utcnow


class ExpectedInventory(Base, TimestampMixin):
    """Layer 1: raw physical count per (sku, location), independent of batch ownership."""

    __tablename__ = "expected_inventory"
    __table_args__ = (UniqueConstraint("sku", "location", name="uq_expected_sku_location"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(128), nullable=False)
    item_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    counted_by: Mapped[str | None] = mapped_column(String(128), nullable=True)


class BatchAllocation(Base, TimestampMixin):
    """Layer 2: the same (sku, location) quantity broken down by owning batch.

    total_allocated always equals sum(allocations.values()); callers recompute it
    from the full map on every write. The map is replaced, never mutated in place.
    """

    __tablename__ = "batch_allocations"
    __table_args__ = (UniqueConstraint("sku", "location", name="uq_allocation_sku_location"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(128), nullable=False)
    allocations: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False, default=dict)
    total_allocated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class InventoryTransaction(Base):
    """Auditable stock movement. Negative amount for consumption."""

    __tablename__ = "inventory_transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(String(256), unique=True, nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    new_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str] = mapped_column(String(128), nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="completed")
    performed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    batch_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
