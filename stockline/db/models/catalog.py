"""ORM models for catalog data read by the engine: Item, Bom, CarType, ZoneBomMapping."""

from typing import Any

from sqlalchemy import JSON, Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stockline.db.base import Base, TimestampMixin


class Item(Base, TimestampMixin):
    """Catalog entry keyed by SKU."""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(32), nullable=True)


class Bom(Base, TimestampMixin):
    """Bill of materials: a recipe, not an inventory record. Components keep their listed order."""

    __tablename__ = "boms"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    bom_code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    # [{"sku": str, "name": str | None, "quantity": int}, ...]
    components: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)


class CarType(Base, TimestampMixin):
    """Product variant."""

    __tablename__ = "car_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    car_code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ZoneBomMapping(Base, TimestampMixin):
    """Which BOM is required (and consumed) when a car type finishes a zone."""

    __tablename__ = "zone_bom_mappings"
    __table_args__ = (UniqueConstraint("zone_id", "car_code", "bom_code", name="uq_zone_car_bom"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    zone_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    car_code: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    bom_code: Mapped[str] = mapped_column(String(64), nullable=False)
    consume_on_completion: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
