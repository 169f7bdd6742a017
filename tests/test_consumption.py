"""Tests for completion-triggered consumption and batch lifecycle."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from db_case import DatabaseTestCase

from stockline.db.repositories import batch_repo, catalog_repo, inventory_repo
from stockline.errors import BatchNotFoundError
from stockline.services import inventory_store, lifecycle
from stockline.services.consumption import consume_bom_for_car_completion


class TestConsumption(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        catalog_repo.upsert_bom("BOM-1", "Doors", [{"sku": "A", "quantity": 5}, {"sku": "B", "quantity": 2}])
        catalog_repo.upsert_zone_mapping("Z1", "SEDAN", "BOM-1")

    def test_consumes_first_found_records(self):
        inventory_store.set_raw_count("A", "L1", 3, counted_by="counter")
        inventory_store.set_raw_count("A", "L2", 10, counted_by="counter")
        inventory_store.set_raw_count("B", "L1", 2, counted_by="counter")

        report = asyncio.run(consume_bom_for_car_completion("vin1", "Z1", "SEDAN", "operator"))
        self.assertEqual(report.consumed_by_sku(), {"A": 5, "B": 2})
        self.assertEqual(inventory_store.available_by_sku(), {"A": 8, "B": 0})

        amounts = {(r.sku, r.location): r.amount for r in inventory_store.get_raw_records()}
        self.assertEqual(amounts[("A", "L1")], 0)
        self.assertEqual(amounts[("A", "L2")], 8)

        transactions = inventory_repo.list_transactions(reference="CAR_VIN1_ZONE_Z1")
        self.assertEqual([(t.sku, t.location, t.amount) for t in transactions], [("A", "L1", -3), ("A", "L2", -2), ("B", "L1", -2)])
        self.assertTrue(all(t.performed_by == "operator" for t in transactions))

    def test_shortfall_is_reported_not_raised(self):
        inventory_store.set_raw_count("A", "L1", 3, counted_by="counter")
        report = asyncio.run(consume_bom_for_car_completion("V1", "Z1", "SEDAN", "operator"))
        shortfalls = {c.sku: c.shortfall for c in report.components}
        self.assertEqual(shortfalls, {"A": 2, "B": 2})
        self.assertEqual(set(report.model_dump()), {"vin", "zone_id", "car_type", "components", "skipped_boms"})
        self.assertEqual(inventory_store.available_by_sku(), {"A": 0})

    def test_missing_bom_is_skipped(self):
        catalog_repo.upsert_zone_mapping("Z1", "SEDAN", "BOM-GONE")
        inventory_store.set_raw_count("A", "L1", 5, counted_by="counter")
        inventory_store.set_raw_count("B", "L1", 5, counted_by="counter")
        report = asyncio.run(consume_bom_for_car_completion("V1", "Z1", "SEDAN", "operator"))
        self.assertEqual(report.skipped_boms, ["BOM-GONE"])
        self.assertEqual(report.consumed_by_sku(), {"A": 5, "B": 2})

    def test_other_zone_consumes_nothing(self):
        inventory_store.set_raw_count("A", "L1", 5, counted_by="counter")
        report = asyncio.run(consume_bom_for_car_completion("V1", "Z9", "SEDAN", "operator"))
        self.assertEqual(report.components, [])
        self.assertEqual(inventory_store.available_by_sku(), {"A": 5})


class TestLifecycle(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        catalog_repo.upsert_item("A", "Door panel")
        catalog_repo.upsert_bom("BOM-1", "Doors", [{"sku": "A", "quantity": 4}])
        catalog_repo.upsert_zone_mapping("Z1", "SEDAN", "BOM-1")
        lifecycle.create_batch(
            "B1",
            name="First",
            car_type="SEDAN",
            items=[{"sku": "A", "quantity": 8}],
            car_vins=["V1", "V2"],
        )
        batch_repo.add_vin_plan("B1", "V1", "SEDAN")
        batch_repo.add_vin_plan("B1", "V2", "SEDAN")

    def test_activation_snapshots_items(self):
        requirements = lifecycle.activate_batch("B1", activated_by="planner")
        self.assertEqual(len(requirements), 1)
        self.assertEqual(requirements[0].name, "Door panel")
        self.assertEqual((requirements[0].remaining, requirements[0].total_cars), (8, 2))
        self.assertEqual(lifecycle.list_active_batch_ids(), ["B1"])

    def test_activate_missing_batch(self):
        with self.assertRaises(BatchNotFoundError):
            lifecycle.activate_batch("NOPE")

    def test_activation_sums_repeated_skus(self):
        lifecycle.create_batch(
            "B2",
            car_type="SEDAN",
            items=[{"sku": "A", "quantity": 1}, {"sku": "C", "quantity": 4}, {"sku": "A", "quantity": 2}],
            car_vins=["V3"],
        )
        self.assertEqual([(i.sku, i.quantity) for i in lifecycle.get_batch("B2").items], [("A", 3), ("C", 4)])

        requirements = lifecycle.activate_batch("B2")
        self.assertEqual([(r.sku, r.total_needed) for r in requirements], [("A", 3), ("C", 4)])
        self.assertEqual(lifecycle.get_batch("B2").status, "in_progress")

    def test_packing_list_items_merge_into_existing(self):
        batch_repo.merge_batch_items("B1", [{"sku": "A", "quantity": 2}, {"sku": "D", "quantity": 1}])
        self.assertEqual([(i.sku, i.quantity) for i in lifecycle.get_batch("B1").items], [("A", 10), ("D", 1)])

    def test_zone_completion_updates_progress(self):
        lifecycle.activate_batch("B1")
        inventory_store.set_raw_count("A", "L1", 20, counted_by="counter")

        asyncio.run(lifecycle.handle_zone_completion("v1", "Z1", "SEDAN", "operator"))
        req = batch_repo.get_requirements("B1")[0]
        self.assertEqual((req.consumed, req.remaining, req.cars_completed), (4, 4, 1))

        asyncio.run(lifecycle.handle_zone_completion("V2", "Z1", "SEDAN", "operator"))
        asyncio.run(lifecycle.handle_zone_completion("V2", "Z1", "SEDAN", "operator", batch_id="B1"))
        req = batch_repo.get_requirements("B1")[0]
        self.assertEqual((req.consumed, req.remaining, req.cars_completed), (12, 0, 2))

    def test_delete_batch_cascades_and_zeroes_stock(self):
        lifecycle.activate_batch("B1")
        batch_repo.add_receipt("B1", "A", 6, location="L1")
        inventory_store.add_to_batch_allocation("A", "L1", "B1", 6)
        inventory_store.add_unassigned_stock("A", "L1", 3)

        counts = asyncio.run(lifecycle.delete_batch("B1", deleted_by="admin"))
        self.assertEqual(counts["requirements"], 1)
        self.assertEqual(counts["vin_plans"], 2)
        self.assertEqual(counts["receipts"], 1)
        self.assertEqual(counts["allocation_records"], 1)
        self.assertIsNone(lifecycle.get_batch("B1"))
        self.assertEqual(batch_repo.list_vin_plans("B1"), [])
        self.assertEqual(inventory_store.get_batch_allocation("A", "L1").allocations, {"UNASSIGNED": 3})
        self.assertEqual(inventory_store.available_by_sku(), {"A": 3})

    def test_delete_missing_batch(self):
        with self.assertRaises(BatchNotFoundError):
            asyncio.run(lifecycle.delete_batch("NOPE", deleted_by="admin"))

    def test_set_status(self):
        batch = lifecycle.set_batch_status("B1", "completed")
        self.assertEqual(batch.status, "completed")
        self.assertEqual([b.batch_id for b in lifecycle.list_batches("completed")], ["B1"])
