"""DB repositories: sync functions returning detached pydantic records."""

from stockline.db.repositories import batch_repo, catalog_repo, inventory_repo
from stockline.db.repositories.inventory_repo import record_key

__all__ = [
    "batch_repo",
    "catalog_repo",
    "inventory_repo",
    "record_key",
]
