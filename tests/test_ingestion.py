"""Tests for CSV ingestion."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from db_case import DatabaseTestCase

from stockline.db.repositories import batch_repo, catalog_repo
from stockline.errors import IngestionError
from stockline.services import inventory_store
from stockline.services.ingestion import (
    import_batches,
    import_boms,
    import_car_types,
    import_packing_list,
    import_stock_counts,
    import_vin_plans,
    import_zone_mappings,
)
from stockline.services.requirements import RequirementResolver


class TestCatalogImport(DatabaseTestCase):
    def test_catalog_files_feed_the_resolver(self):
        import_car_types("carCode,name\nSEDAN,Sedan\nCOUPE,Coupe\n")
        boms = import_boms(
            "bomCode,name,sku,quantity\n"
            "BOM-A,Front,X,3\n"
            "BOM-A,Front,Y,1\n"
            "BOM-B,Rear,X,4\n"
            "BOM-B,Rear,Z,0\n"
        )
        self.assertEqual(boms.success, 3)
        self.assertEqual(boms.stats.skipped_rows, 1)
        import_zone_mappings(
            "zoneId,carCode,bomCode,consumeOnCompletion\n"
            "Z1,SEDAN,BOM-A,true\n"
            "Z2,SEDAN,BOM-B,\n"
            "Z3,COUPE,BOM-B,false\n"
        )
        self.assertEqual(catalog_repo.list_car_codes(), ["COUPE", "SEDAN"])
        self.assertEqual(RequirementResolver().requirements_for("SEDAN"), {"X": 7, "Y": 1})
        self.assertEqual(RequirementResolver().requirements_for("COUPE"), {})

    def test_bad_header_rejects_file(self):
        with self.assertRaises(IngestionError):
            import_boms("code,sku\nBOM-A,X\n")


class TestBatchImport(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        import_batches("batchId,name,carType\nB1,First,SEDAN\nB2,Second,COUPE\n,Nameless,SEDAN\n")

    def test_batches_created_in_planning(self):
        self.assertEqual([b.batch_id for b in batch_repo.list_batches()], ["B1", "B2"])
        self.assertEqual(batch_repo.get_batch("B1").status, "planning")

    def test_vin_plans_keep_file_order_and_count_cars(self):
        result = import_vin_plans(
            "batchId,vin,carType\n"
            "B1,vin-2,SEDAN\n"
            "B1,VIN-1,SEDAN\n"
            "B1,,SEDAN\n"
            "B9,VIN-9,SEDAN\n"
        )
        self.assertEqual(result.stats.total_rows, 4)
        self.assertEqual(result.success, 3)
        self.assertTrue(any("B9" in e for e in result.errors))
        self.assertEqual([p.vin for p in batch_repo.list_vin_plans("B1")], ["VIN-2", "VIN-1"])
        batch = batch_repo.get_batch("B1")
        self.assertEqual(batch.car_vins, ["VIN-2", "VIN-1"])
        self.assertEqual(batch.total_cars, 2)

    def test_packing_list_merges_items_and_allocates(self):
        result = import_packing_list(
            "batchId,sku,quantity,location,boxId\n"
            "B1,A,10,L1,BOX-1\n"
            "B1,A,5,L2,BOX-2\n"
            "B1,C,4,,\n"
            "B7,A,1,L1,\n",
            uploaded_by="receiver",
        )
        self.assertEqual(result.success, 3)
        self.assertEqual(result.stats.skipped_rows, 1)
        items = {i.sku: i.quantity for i in batch_repo.get_batch("B1").items}
        self.assertEqual(items, {"A": 15, "C": 4})
        self.assertEqual(inventory_store.get_batch_allocation("A", "L2").allocations, {"B1": 5})
        self.assertEqual(inventory_store.available_by_sku(), {"A": 15})

    def test_stock_counts_default_to_unassigned(self):
        import_stock_counts("sku,location,quantity,batchId\nA,L1,7,\nA,L1,3,B1\n")
        record = inventory_store.get_batch_allocation("A", "L1")
        self.assertEqual(record.allocations, {"UNASSIGNED": 7, "B1": 3})
        self.assertEqual(inventory_store.available_by_sku(), {"A": 10})
