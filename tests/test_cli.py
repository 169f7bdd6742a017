"""Tests for the CLI commands (typer runner against a fresh database)."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from db_case import DatabaseTestCase
from typer.testing import CliRunner

from stockline.cli import app
from stockline.db.repositories import batch_repo
from stockline.services import inventory_store

runner = CliRunner()


class TestCli(DatabaseTestCase):
    def _write(self, name, text):
        path = Path(self._tmpdir) / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    def _seed(self):
        for kind, name, text in (
            ("boms", "boms.csv", "bomCode,name,sku,quantity\nBOM-1,Seats,A,5\n"),
            ("zone-mappings", "zones.csv", "zoneId,carCode,bomCode\nZ1,SEDAN,BOM-1\n"),
            ("batches", "batches.csv", "batchId,name,carType\nB1,First,SEDAN\n"),
            ("vin-plans", "vins.csv", "batchId,vin,carType\nB1,V1,SEDAN\nB1,V2,SEDAN\n"),
            ("packing-list", "packing.csv", "batchId,sku,quantity,location\nB1,A,7,L1\n"),
        ):
            result = runner.invoke(app, ["import", kind, self._write(name, text)])
            self.assertEqual(result.exit_code, 0, result.output)

    def test_import_and_vin_health(self):
        self._seed()
        result = runner.invoke(app, ["vin-health", "B1", "--show-ready"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("V1", result.output)
        self.assertIn("blocked", result.output)

    def test_import_rejects_bad_header(self):
        result = runner.invoke(app, ["import", "boms", self._write("bad.csv", "code\nX\n")])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("missing required columns", result.output)

    def test_unknown_import_kind(self):
        result = runner.invoke(app, ["import", "widgets", self._write("w.csv", "a\n1\n")])
        self.assertEqual(result.exit_code, 1)

    def test_activate_complete_and_health(self):
        self._seed()
        self.assertEqual(runner.invoke(app, ["activate", "B1"]).exit_code, 0)
        self.assertEqual(batch_repo.get_batch("B1").status, "in_progress")

        result = runner.invoke(app, ["complete", "V1", "Z1", "SEDAN"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(batch_repo.get_requirements("B1")[0].consumed, 5)

        result = runner.invoke(app, ["global-health"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("B1", result.output)

    def test_batch_health_not_activated(self):
        self._seed()
        result = runner.invoke(app, ["batch-health", "B1"])
        self.assertEqual(result.exit_code, 1)

    def test_zero_stock_for_batch(self):
        self._seed()
        result = runner.invoke(app, ["zero-stock", "--batch", "B1"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(inventory_store.available_by_sku(), {"A": 0})

    def test_transfer_moves_batch_stock_and_reverses(self):
        self._seed()
        result = runner.invoke(app, ["transfer", "A", "5", "L1", "L2", "--batch", "B1"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Moved 5/5", result.output)
        self.assertEqual(inventory_store.get_batch_allocation("A", "L1").allocations, {"B1": 2})
        self.assertEqual(inventory_store.get_batch_allocation("A", "L2").allocations, {"B1": 5})

        result = runner.invoke(app, ["transfer", "A", "5", "L1", "L2", "--batch", "B1", "--reverse"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(inventory_store.get_batch_allocation("A", "L1").allocations, {"B1": 7})
        self.assertEqual(inventory_store.get_batch_allocation("A", "L2").allocations, {})
        self.assertEqual(inventory_store.available_by_sku(), {"A": 7})

    def test_transfer_clamps_to_available(self):
        self._seed()
        result = runner.invoke(app, ["transfer", "A", "20", "L1", "L2", "--batch", "B1"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Only 7 available", result.output)
        self.assertEqual(inventory_store.get_batch_allocation("A", "L2").allocations, {"B1": 7})

    def test_transfer_ignores_bom_codes(self):
        result = runner.invoke(app, ["transfer", "BOM-1", "1", "L1", "L2"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("nothing moved", result.output)

    def test_zero_stock_needs_one_target(self):
        result = runner.invoke(app, ["zero-stock"])
        self.assertEqual(result.exit_code, 1)

    def test_gaps(self):
        self._seed()
        result = runner.invoke(app, ["gaps"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("match", result.output)
