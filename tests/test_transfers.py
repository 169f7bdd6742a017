"""Tests for manual transfers between locations."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from db_case import DatabaseTestCase

from stockline.services import inventory_store
from stockline.services.transfers import apply_rectification, apply_transfer


class TestTransfers(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        inventory_store.add_to_batch_allocation("A", "DOCK", "B1", 6)
        inventory_store.add_unassigned_stock("A", "DOCK", 2)

    def test_moves_batch_slice_and_syncs_both_ends(self):
        result = apply_transfer("A", 4, "DOCK", "LINE", batch_id="B1", performed_by="mover")
        self.assertEqual(result.moved, 4)
        self.assertEqual(inventory_store.get_batch_allocation("A", "DOCK").allocations, {"B1": 2, "UNASSIGNED": 2})
        self.assertEqual(inventory_store.get_batch_allocation("A", "LINE").allocations, {"B1": 4})
        self.assertEqual(inventory_store.find_consistency_gaps(), [])

    def test_transfer_is_capped_at_available(self):
        result = apply_transfer("A", -5, "DOCK", "LINE")
        self.assertEqual((result.batch_id, result.requested, result.moved), ("UNASSIGNED", 5, 2))

    def test_nothing_to_move(self):
        result = apply_transfer("A", 3, "DOCK", "LINE", batch_id="B9")
        self.assertEqual(result.moved, 0)
        self.assertIsNone(inventory_store.get_batch_allocation("A", "LINE"))

    def test_bom_codes_are_ignored(self):
        self.assertIsNone(apply_transfer("BOM-1", 1, "DOCK", "LINE"))

    def test_destination_required(self):
        with self.assertRaises(ValueError):
            apply_transfer("A", 1, "DOCK", "")

    def test_rectification_reverses_transfer(self):
        original = apply_transfer("A", 4, "DOCK", "LINE", batch_id="B1")
        apply_rectification(original)
        self.assertEqual(inventory_store.get_batch_allocation("A", "DOCK").allocations, {"B1": 6, "UNASSIGNED": 2})
        self.assertEqual(inventory_store.get_batch_allocation("A", "LINE").allocations, {})
