"""Tests for batch and global health status."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from db_case import DatabaseTestCase

from stockline.db.repositories import batch_repo
from stockline.errors import RequirementsNotFoundError
from stockline.models.data import BatchRequirementRecord
from stockline.services import inventory_store, lifecycle
from stockline.services.batch_health import (
    evaluate_requirements,
    get_batch_health_check,
    get_batch_health_status,
    get_global_batch_health,
)


def _req(sku, remaining, cars_completed=0, total_cars=10, total_needed=None):
    total_needed = total_needed if total_needed is not None else remaining
    return BatchRequirementRecord(
        batch_id="B1",
        sku=sku,
        total_needed=total_needed,
        consumed=total_needed - remaining,
        remaining=remaining,
        cars_completed=cars_completed,
        total_cars=total_cars,
    )


def test_blocked_component_is_critical():
    health = evaluate_requirements("B1", [_req("A", 20), _req("B", 10)], {"A": 15, "B": 50})
    assert health.status == "critical"
    assert [(c.sku, c.shortfall) for c in health.blocked_components] == [("A", 5)]
    assert [(c.sku, c.excess) for c in health.excess_components] == [("B", 40)]
    # A: 15 units at 2 per car
    assert health.can_produce_cars == 7


def test_low_margin_is_warning():
    health = evaluate_requirements("B1", [_req("A", 100)], {"A": 105})
    assert health.status == "warning"
    assert health.blocked_components == []


def test_comfortable_margin_is_healthy():
    health = evaluate_requirements("B1", [_req("A", 100)], {"A": 150})
    assert health.status == "healthy"
    assert health.can_produce_cars == 15


def test_finished_components_are_ignored():
    health = evaluate_requirements("B1", [_req("A", 0, cars_completed=10, total_needed=20)], {})
    assert health.status == "healthy"
    assert health.cars_remaining == 0
    assert health.can_produce_cars == 0


def test_cars_remaining_from_progress():
    health = evaluate_requirements("B1", [_req("A", 12, cars_completed=4, total_cars=10)], {"A": 40})
    assert health.cars_remaining == 6
    assert health.total_cars == 10


class TestBatchHealthStatus(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        for batch_id, qty in (("B1", 20), ("B2", 8)):
            lifecycle.create_batch(
                batch_id,
                name=batch_id,
                car_type="SEDAN",
                items=[{"sku": "A", "quantity": qty}],
                car_vins=[f"{batch_id}-V1", f"{batch_id}-V2"],
            )

    def test_not_activated_batch_raises(self):
        with self.assertRaises(RequirementsNotFoundError):
            asyncio.run(get_batch_health_status("B1"))

    def test_activated_batch_against_stock(self):
        lifecycle.activate_batch("B1")
        inventory_store.add_to_batch_allocation("A", "L1", "B1", 12)
        health = asyncio.run(get_batch_health_status("B1"))
        self.assertEqual(health.status, "critical")
        self.assertEqual(health.blocked_components[0].shortfall, 8)
        self.assertEqual(health.can_produce_cars, 1)

    def test_global_health_covers_active_batches_only(self):
        lifecycle.activate_batch("B1")
        lifecycle.activate_batch("B2")
        lifecycle.create_batch("B3", items=[{"sku": "A", "quantity": 1}])
        inventory_store.add_unassigned_stock("A", "L1", 10)

        report = asyncio.run(get_global_batch_health())
        self.assertEqual(sorted(report.batches), ["B1", "B2"])
        # Each batch is judged against the same 10 units; no cross-batch deduction
        self.assertEqual(report.batches["B1"].status, "critical")
        self.assertEqual(report.batches["B2"].status, "healthy")
        self.assertEqual(report.count("critical"), 1)
        self.assertEqual(report.failures, [])

    def test_global_health_reports_failed_batch(self):
        lifecycle.activate_batch("B1")
        batch_repo.set_batch_status("B2", "in_progress")
        report = asyncio.run(get_global_batch_health())
        self.assertEqual(list(report.batches), ["B1"])
        self.assertEqual([f.key for f in report.failures], ["B2"])

    def test_global_health_without_active_batches(self):
        report = asyncio.run(get_global_batch_health())
        self.assertEqual(report.batches, {})

    def test_legacy_health_check(self):
        lifecycle.create_batch("B4", items=[{"sku": "A", "quantity": 2}, {"sku": "C", "quantity": 1}], car_vins=["X1", "X2", "X3"])
        inventory_store.add_unassigned_stock("A", "L1", 4)
        inventory_store.add_unassigned_stock("C", "L1", 10)
        check = asyncio.run(get_batch_health_check("B4", checked_by="tester"))
        self.assertEqual(check.health_status, "warning")
        self.assertEqual(check.available_components, 2)
        self.assertEqual([(m.sku, m.needed, m.shortfall) for m in check.missing_components], [("A", 6, 2)])
        self.assertEqual([(e.sku, e.excess) for e in check.excess_components], [("C", 7)])
