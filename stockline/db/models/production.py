"""ORM models for production planning: Batch, VinPlan, BatchRequirement, BatchReceipt."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stockline.db.base import Base, TimestampMixin, utcnow

BATCH_STATUS_PLANNING = "planning"


class Batch(Base, TimestampMixin):
    """Production batch. Only in_progress batches take part in allocation accounting."""

    __tablename__ = "batches"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    batch_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    car_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    car_vins: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Declared packing-list requirements: [{"sku", "name", "quantity"}]
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    total_cars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=BATCH_STATUS_PLANNING, index=True)


class VinPlan(Base):
    """One planned vehicle. Autoincrement id preserves ingestion order (the build priority)."""

    __tablename__ = "vin_plans"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    batch_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    vin: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    car_type: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class BatchRequirement(Base, TimestampMixin):
    """Requirement tracking snapshot per (batch, sku), created on activation."""

    __tablename__ = "batch_requirements"
    __table_args__ = (UniqueConstraint("batch_id", "sku", name="uq_batch_requirement"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    batch_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    total_needed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    consumed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cars_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_cars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class BatchReceipt(Base):
    """Packing-list line received for a batch."""

    __tablename__ = "batch_receipts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    batch_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str | None] = mapped_column(String(128), nullable=True)
    box_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
