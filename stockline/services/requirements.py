"""Requirement resolver: car type -> aggregated per-SKU quantities."""

from stockline.db.repositories import catalog_repo
from stockline.errors import BomNotFoundError
from stockline.utils.logger import get_logger

logger = get_logger("stockline.services.requirements")


class RequirementResolver:
    """Expands car types through zone mappings and BOMs.

    Results are memoized per car type for the lifetime of the instance, so
    create one resolver per health run and let it go afterwards.
    """

    def __init__(self) -> None:
        self._cache: dict[str, dict[str, int]] = {}

    def requirements_for(self, car_type: str) -> dict[str, int]:
        if car_type in self._cache:
            return self._cache[car_type]

        mappings = catalog_repo.list_zone_mappings(car_code=car_type)
        bom_codes = list(dict.fromkeys(m.bom_code for m in mappings if m.consume_on_completion))

        required: dict[str, int] = {}
        for bom_code in bom_codes:
            bom = catalog_repo.get_bom(bom_code)
            if bom is None:
                logger.error("requirements.bom_missing", car_type=car_type, bom_code=bom_code)
                raise BomNotFoundError(bom_code)
            for component in bom.components:
                # Same SKU may appear in several BOMs: sum, never overwrite
                required[component.sku] = required.get(component.sku, 0) + component.quantity

        logger.debug("requirements.resolved", car_type=car_type, boms=bom_codes, skus=len(required))
        self._cache[car_type] = required
        return required
