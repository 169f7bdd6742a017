"""Tests for the HTTP API: report routes and the zone-completion event."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from db_case import DatabaseTestCase
from fastapi.testclient import TestClient

from stockline.api import create_app
from stockline.db.repositories import batch_repo, catalog_repo
from stockline.services import inventory_store, lifecycle


class TestApiRoutes(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        catalog_repo.upsert_bom("BOM-1", "Seats", [{"sku": "A", "quantity": 5}])
        catalog_repo.upsert_zone_mapping("Z1", "SEDAN", "BOM-1")
        lifecycle.create_batch("B1", name="First", car_type="SEDAN", items=[{"sku": "A", "quantity": 10}], car_vins=["V1", "V2"])
        batch_repo.add_vin_plan("B1", "V1", "SEDAN")
        batch_repo.add_vin_plan("B1", "V2", "SEDAN")
        inventory_store.add_to_batch_allocation("A", "L1", "B1", 7)
        self.client = TestClient(create_app())

    def test_health(self):
        r = self.client.get("/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"status": "ok"})

    def test_batches(self):
        r = self.client.get("/batches")
        self.assertEqual(r.status_code, 200)
        self.assertEqual([b["batch_id"] for b in r.json()["items"]], ["B1"])
        self.assertEqual(self.client.get("/batches/B1").json()["total_cars"], 2)
        self.assertEqual(self.client.get("/batches/NOPE").status_code, 404)

    def test_vin_health(self):
        r = self.client.get("/batches/B1/vin-health")
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(data["summary"]["ready_vins"], 1)
        self.assertEqual([v["status"] for v in data["results"]], ["ready", "blocked"])
        self.assertEqual(self.client.get("/batches/NOPE/vin-health").status_code, 404)

    def test_batch_health_requires_activation(self):
        self.assertEqual(self.client.get("/batches/B1/health").status_code, 404)
        lifecycle.activate_batch("B1")
        r = self.client.get("/batches/B1/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["status"], "critical")

    def test_global_health(self):
        lifecycle.activate_batch("B1")
        r = self.client.get("/health/global")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(list(r.json()["batches"]), ["B1"])

    def test_inventory_views(self):
        allocations = self.client.get("/inventory/allocations", params={"batch_id": "B1"}).json()["items"]
        self.assertEqual(allocations[0]["allocations"], {"B1": 7})
        self.assertEqual(self.client.get("/inventory/gaps").json()["count"], 0)
        self.assertEqual(self.client.get("/inventory/progress").json()["items"], [{"batch_id": "B1", "total_allocated": 7}])

    def test_zone_completion_event(self):
        lifecycle.activate_batch("B1")
        r = self.client.post(
            "/events/zone-completion",
            json={"vin": "V1", "zoneId": "Z1", "carType": "SEDAN", "completedBy": "line-3"},
        )
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(data["consumed"], {"A": 5})
        self.assertEqual(data["shortfalls"], {})
        self.assertEqual(batch_repo.get_requirements("B1")[0].remaining, 5)
        self.assertEqual(inventory_store.available_by_sku(), {"A": 2})

    def test_zone_completion_rejects_incomplete_event(self):
        r = self.client.post("/events/zone-completion", json={"vin": "V1"})
        self.assertEqual(r.status_code, 422)
