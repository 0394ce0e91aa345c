#!/usr/bin/env python3
"""
Unit tests for the dashboard CSV/XLSX import script.

Tests run against temporary files and databases; no network access.
"""

import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

# Add scripts directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

try:
    import import_csv
except ImportError as e:
    raise ImportError(f"Cannot import import_csv module: {e}")

from tractionboard.db.sqlite import SQLiteDB
from tractionboard.ingestion.classifier import EmptyResultError
from tractionboard.ingestion.template import SAMPLE_CSV


class TestImportCsv(unittest.TestCase):
    """Test the import script end to end."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.db_path = self.tmp / "db" / "tractionboard.db"

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, name, content):
        path = self.tmp / name
        path.write_text(content, encoding="utf-8")
        return path

    def _run(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = import_csv.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_load_result(self):
        """Test parsing a file from disk."""
        path = self._write("sample.csv", SAMPLE_CSV)
        result = import_csv.load_result(path)
        self.assertEqual(result.counts(), {"scorecard": 5, "vto": 7, "issues": 3, "todos": 3})

    def test_load_result_rejects_empty(self):
        """Test that a file with no recognized rows raises."""
        path = self._write("notes.csv", "type,title\nmeeting,Weekly\n")
        with self.assertRaises(EmptyResultError):
            import_csv.load_result(path)

    def test_dry_run_prints_json(self):
        """Test --dry-run output and that nothing is written."""
        path = self._write("todos.csv", "type,title\ntodo,Plan\n")
        code, out, _ = self._run(str(path), "--db", str(self.db_path), "--dry-run")
        self.assertEqual(code, 0)
        output = json.loads(out)
        self.assertEqual(output["counts"], {"todos": 1})
        self.assertEqual(output["data"]["todos"][0]["title"], "Plan")
        self.assertFalse(self.db_path.exists())

    def test_import_writes_database(self):
        """Test a real import creates the database and rows."""
        path = self._write("sample.csv", SAMPLE_CSV)
        code, out, _ = self._run(str(path), "--db", str(self.db_path))
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["counts"]["todos"], 3)

        with SQLiteDB(str(self.db_path)) as db:
            row = db.fetchone("SELECT COUNT(*) AS n FROM todos")
        self.assertEqual(row["n"], 3)

    def test_replace_mode(self):
        """Test --mode replace clears earlier rows of the same family."""
        path = self._write("todos.csv", "type,title\ntodo,Plan\n")
        self._run(str(path), "--db", str(self.db_path))
        self._run(str(path), "--db", str(self.db_path))
        code, _, _ = self._run(str(path), "--db", str(self.db_path), "--mode", "replace")
        self.assertEqual(code, 0)

        with SQLiteDB(str(self.db_path)) as db:
            row = db.fetchone("SELECT COUNT(*) AS n FROM todos")
        self.assertEqual(row["n"], 1)

    def test_template(self):
        """Test --template writes the sample CSV."""
        code, out, _ = self._run("--template")
        self.assertEqual(code, 0)
        self.assertEqual(out, SAMPLE_CSV)

    def test_bad_file_reports_error(self):
        """Test ingestion errors go to stderr with exit code 1."""
        path = self._write("header.csv", "type,title\n")
        code, _, err = self._run(str(path), "--dry-run")
        self.assertEqual(code, 1)
        self.assertIn("CSV must have at least a header and one data row", err)

    def test_missing_file_reports_error(self):
        """Test a missing path is reported instead of raising."""
        code, _, err = self._run(str(self.tmp / "missing.csv"), "--dry-run")
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("Error:"))

    def test_file_required_without_template(self):
        """Test argparse rejects a call with neither file nor --template."""
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                import_csv.main([])


if __name__ == "__main__":
    unittest.main()
