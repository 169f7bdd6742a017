"""CSV ingestion for catalog data, batches, VIN plans, packing lists and stock counts.

Headers are matched case-insensitively. A missing required column rejects the
whole file with IngestionError; a bad row is skipped and reported in the
ImportResult.
"""

from typing import Any, Callable, Optional

from stockline.config import UNASSIGNED_BATCH_ID
from stockline.db.models.production import BATCH_STATUS_PLANNING
from stockline.db.repositories import batch_repo, catalog_repo, inventory_repo
from stockline.errors import IngestionError
from stockline.models.results import ImportResult
from stockline.utils.csv_loader import read_csv_text
from stockline.utils.logger import get_logger

logger = get_logger("stockline.services.ingestion")


def _parse_bool(val: Any, default: bool = True) -> bool:
    if isinstance(val, bool):
        return val
    if isinstance(val, str) and val.strip():
        return val.strip().lower() in ("true", "1", "yes")
    return default


def _parse_int(val: Any, default: int = 0) -> int:
    try:
        return int(val) if val is not None and str(val).strip() else default
    except (TypeError, ValueError):
        return default


def _require_columns(kind: str, header: list[str], required: tuple[str, ...]) -> None:
    missing = [c for c in required if c not in header]
    if missing:
        logger.error("ingestion.bad_header", kind=kind, missing=missing, header=header)
        raise IngestionError(f"{kind} CSV is missing required columns: {', '.join(missing)}")


def _run_rows(
    kind: str,
    text: str,
    required: tuple[str, ...],
    handle: Callable[[dict[str, str]], Optional[str]],
) -> ImportResult:
    """Feed each row to handle(); a returned string is a row error."""
    header, rows = read_csv_text(text)
    _require_columns(kind, header, required)
    result = ImportResult()
    result.stats.total_rows = len(rows)
    for line_no, row in enumerate(rows, start=2):
        error = handle(row)
        if error:
            result.errors.append(f"Row {line_no}: {error}")
            result.stats.skipped_rows += 1
        else:
            result.success += 1
    logger.info(
        "ingestion.complete",
        kind=kind,
        total_rows=result.stats.total_rows,
        imported=result.success,
        skipped=result.stats.skipped_rows,
    )
    return result


def import_car_types(text: str) -> ImportResult:
    """carCode,name[,description]"""

    def handle(row: dict[str, str]) -> Optional[str]:
        if not row.get("carcode"):
            return "carCode is required"
        catalog_repo.upsert_car_type(row["carcode"], row.get("name") or None, row.get("description") or None)
        return None

    return _run_rows("car_types", text, ("carcode", "name"), handle)


def import_boms(text: str) -> ImportResult:
    """bomCode,name,sku,quantity with one row per component; a file replaces each BOM it names."""
    header, rows = read_csv_text(text)
    _require_columns("boms", header, ("bomcode", "name", "sku", "quantity"))

    result = ImportResult()
    result.stats.total_rows = len(rows)
    grouped: dict[str, dict[str, Any]] = {}
    for line_no, row in enumerate(rows, start=2):
        code = row.get("bomcode")
        sku = row.get("sku")
        quantity = _parse_int(row.get("quantity"))
        if not code or not sku or quantity <= 0:
            result.errors.append(f"Row {line_no}: bomCode, sku and a positive quantity are required")
            result.stats.skipped_rows += 1
            continue
        bom = grouped.setdefault(code, {"name": row.get("name") or None, "components": []})
        bom["components"].append({"sku": sku, "name": row.get("itemname") or None, "quantity": quantity})
        result.success += 1

    for code, bom in grouped.items():
        catalog_repo.upsert_bom(code, bom["name"], bom["components"])
    logger.info("ingestion.complete", kind="boms", boms=len(grouped), imported=result.success)
    return result


def import_zone_mappings(text: str) -> ImportResult:
    """zoneId,carCode,bomCode[,consumeOnCompletion] (default true)"""

    def handle(row: dict[str, str]) -> Optional[str]:
        if not (row.get("zoneid") and row.get("carcode") and row.get("bomcode")):
            return "zoneId, carCode and bomCode are required"
        catalog_repo.upsert_zone_mapping(
            zone_id=row["zoneid"],
            car_code=row["carcode"],
            bom_code=row["bomcode"],
            consume_on_completion=_parse_bool(row.get("consumeoncompletion")),
        )
        return None

    return _run_rows("zone_mappings", text, ("zoneid", "carcode", "bomcode"), handle)


def import_batches(text: str) -> ImportResult:
    """batchId,name,carType[,status]"""

    def handle(row: dict[str, str]) -> Optional[str]:
        if not row.get("batchid"):
            return "batchId is required"
        batch_repo.create_batch(
            row["batchid"],
            name=row.get("name") or None,
            car_type=row.get("cartype") or None,
            status=row.get("status") or BATCH_STATUS_PLANNING,
        )
        return None

    return _run_rows("batches", text, ("batchid", "name", "cartype"), handle)


def import_vin_plans(text: str) -> ImportResult:
    """batchId,vin,carType. Rows are kept in file order, which is the build priority."""
    touched: dict[str, list[str]] = {}
    car_types: dict[str, str] = {}

    def handle(row: dict[str, str]) -> Optional[str]:
        batch_id, vin, car_type = row.get("batchid"), row.get("vin"), row.get("cartype")
        if not (batch_id and vin and car_type):
            return "batchId, vin and carType are required"
        batch_repo.add_vin_plan(batch_id, vin, car_type)
        touched.setdefault(batch_id, []).append(vin.upper())
        car_types.setdefault(batch_id, car_type)
        return None

    result = _run_rows("vin_plans", text, ("batchid", "vin", "cartype"), handle)
    for batch_id, vins in touched.items():
        if not batch_repo.merge_batch_vins(batch_id, vins, car_types[batch_id]):
            logger.warning("ingestion.vin_plans.batch_missing", batch_id=batch_id, vins=len(vins))
            result.errors.append(f"Batch {batch_id} not found; VIN plan rows kept but batch not updated")
    return result


def import_packing_list(text: str, uploaded_by: str = "system") -> ImportResult:
    """batchId,sku,quantity[,location,boxId,notes]

    Saves a receipt per row and merges quantities into the batch items. Rows with
    a location also add the quantity to the batch's allocation slice there.
    """
    items: dict[str, list[dict[str, Any]]] = {}

    def handle(row: dict[str, str]) -> Optional[str]:
        batch_id, sku = row.get("batchid"), row.get("sku")
        quantity = _parse_int(row.get("quantity"))
        if not (batch_id and sku) or quantity <= 0:
            return "batchId, sku and a positive quantity are required"
        if batch_repo.get_batch(batch_id) is None:
            return f"Batch {batch_id} not found"
        location = row.get("location") or None
        batch_repo.add_receipt(
            batch_id,
            sku,
            quantity,
            location=location,
            box_id=row.get("boxid") or None,
            notes=row.get("notes") or None,
            uploaded_by=uploaded_by,
        )
        items.setdefault(batch_id, []).append({"sku": sku, "name": row.get("name") or None, "quantity": quantity})
        if location:
            inventory_repo.add_to_batch_allocation(sku, location, batch_id, quantity)
        return None

    result = _run_rows("packing_list", text, ("batchid", "sku", "quantity"), handle)
    for batch_id, batch_items in items.items():
        batch_repo.merge_batch_items(batch_id, batch_items)
    return result


def import_stock_counts(text: str) -> ImportResult:
    """sku,location,quantity[,batchId]. Rows without a batch go to the UNASSIGNED slice."""

    def handle(row: dict[str, str]) -> Optional[str]:
        sku, location = row.get("sku"), row.get("location")
        quantity = _parse_int(row.get("quantity"))
        if not (sku and location) or quantity <= 0:
            return "sku, location and a positive quantity are required"
        inventory_repo.add_to_batch_allocation(sku, location, row.get("batchid") or UNASSIGNED_BATCH_ID, quantity)
        return None

    return _run_rows("stock_counts", text, ("sku", "location", "quantity"), handle)


IMPORTERS: dict[str, Callable[[str], ImportResult]] = {
    "car-types": import_car_types,
    "boms": import_boms,
    "zone-mappings": import_zone_mappings,
    "batches": import_batches,
    "vin-plans": import_vin_plans,
    "packing-list": import_packing_list,
    "stock": import_stock_counts,
}
