"""Shared base for tests that need a fresh database."""

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from stockline.db import dispose_db, reset_db


class DatabaseTestCase(unittest.TestCase):
    """Each test gets an empty SQLite file database."""

    def setUp(self):
        # File DB so fan-out worker threads see the same data (in-memory is per-connection)
        self._tmpdir = tempfile.mkdtemp(prefix="stockline-test-")
        reset_db(f"sqlite:///{Path(self._tmpdir) / 'test.sqlite'}")

    def tearDown(self):
        dispose_db()
        shutil.rmtree(self._tmpdir, ignore_errors=True)
