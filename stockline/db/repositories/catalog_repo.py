"""Catalog repository: items, BOMs, car types and zone-BOM mappings."""

from typing import Any, Optional

from sqlalchemy import select

from stockline.db import get_session
from stockline.db.models.catalog import Bom, CarType, Item, ZoneBomMapping
from stockline.models.data import BomComponent, BomRecord, ZoneBomMappingRecord


def upsert_item(sku: str, name: str, unit: Optional[str] = None) -> None:
    with get_session() as session:
        row = session.scalars(select(Item).where(Item.sku == sku)).first()
        if row is None:
            session.add(Item(sku=sku, name=name, unit=unit))
        else:
            row.name = name
            row.unit = unit


def upsert_bom(bom_code: str, name: Optional[str], components: list[dict[str, Any]]) -> BomRecord:
    """Create or replace a BOM. Components are validated through BomComponent."""
    parsed = [BomComponent.model_validate(c).model_dump() for c in components]
    with get_session() as session:
        row = session.scalars(select(Bom).where(Bom.bom_code == bom_code)).first()
        if row is None:
            row = Bom(bom_code=bom_code, name=name, components=parsed)
            session.add(row)
        else:
            row.name = name
            row.components = parsed
        session.flush()
        return BomRecord.model_validate(row)


def get_bom(bom_code: str) -> Optional[BomRecord]:
    with get_session() as session:
        row = session.scalars(select(Bom).where(Bom.bom_code == bom_code)).first()
        return BomRecord.model_validate(row) if row is not None else None


def upsert_car_type(car_code: str, name: Optional[str] = None, description: Optional[str] = None) -> None:
    with get_session() as session:
        row = session.scalars(select(CarType).where(CarType.car_code == car_code)).first()
        if row is None:
            session.add(CarType(car_code=car_code, name=name, description=description))
        else:
            row.name = name
            row.description = description


def list_car_codes() -> list[str]:
    with get_session() as session:
        return list(session.scalars(select(CarType.car_code).order_by(CarType.car_code)).all())


def upsert_zone_mapping(
    zone_id: str,
    car_code: str,
    bom_code: str,
    consume_on_completion: bool = True,
) -> ZoneBomMappingRecord:
    with get_session() as session:
        row = session.scalars(
            select(ZoneBomMapping)
            .where(ZoneBomMapping.zone_id == zone_id)
            .where(ZoneBomMapping.car_code == car_code)
            .where(ZoneBomMapping.bom_code == bom_code)
        ).first()
        if row is None:
            row = ZoneBomMapping(
                zone_id=zone_id,
                car_code=car_code,
                bom_code=bom_code,
                consume_on_completion=consume_on_completion,
            )
            session.add(row)
        else:
            row.consume_on_completion = consume_on_completion
        session.flush()
        return ZoneBomMappingRecord.model_validate(row)


def list_zone_mappings(zone_id: Optional[str] = None, car_code: Optional[str] = None) -> list[ZoneBomMappingRecord]:
    """Mappings filtered by zone and/or car type, in creation order."""
    with get_session() as session:
        q = select(ZoneBomMapping)
        if zone_id:
            q = q.where(ZoneBomMapping.zone_id == zone_id)
        if car_code:
            q = q.where(ZoneBomMapping.car_code == car_code)
        rows = session.scalars(q.order_by(ZoneBomMapping.id)).all()
        return [ZoneBomMappingRecord.model_validate(r) for r in rows]
