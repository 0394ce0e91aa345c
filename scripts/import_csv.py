#!/usr/bin/env python3
"""
Dashboard CSV/XLSX importer

Classify a dashboard export (scorecard, VTO, issue and to-do rows in one
file) and load it into a Tractionboard database, or print what would be
loaded.

Usage:
    python import_csv.py export.csv --dry-run
    python import_csv.py export.csv --db data/tractionboard.db
    python import_csv.py export.xlsx --db data/tractionboard.db --mode replace
    python import_csv.py --template > sample.csv
"""

import argparse
import json
import sys
from pathlib import Path

from tractionboard.db.sqlite import SQLiteDB
from tractionboard.ingestion.classifier import IngestionError, require_data
from tractionboard.ingestion.readers import parse_upload
from tractionboard.ingestion.template import SAMPLE_CSV
from tractionboard.services import Repositories
from tractionboard.services.dashboard import DashboardService
from tractionboard.services.importer import IMPORT_MODES, DashboardImporter


def load_result(path):
    """
    Parse a file from disk into an ImportResult.

    Args:
        path: Path to a .csv, .txt or .xlsx file

    Returns:
        ImportResult with at least one family present

    Raises:
        IngestionError: If the file is unsupported, malformed or empty
    """
    path = Path(path)
    return require_data(parse_upload(path.name, path.read_bytes()))


def import_into(db_path, result, mode="append", snapshot_key="ninetyData"):
    """
    Write a parsed result into the database at db_path.

    Returns:
        ImportSummary describing what was written
    """
    with SQLiteDB(str(db_path)) as db:
        repos = Repositories.from_db(db)
        dashboard = DashboardService(repos, snapshot_key=snapshot_key)
        return DashboardImporter(db, repos, dashboard).apply(result, mode=mode)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Import a dashboard CSV/XLSX export into Tractionboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show how a file would be classified
  %(prog)s export.csv --dry-run

  # Append rows to the database
  %(prog)s export.csv --db data/tractionboard.db

  # Replace the families present in the file
  %(prog)s export.csv --db data/tractionboard.db --mode replace

  # Write the sample template
  %(prog)s --template > sample.csv

Row families (column 0 of each data row):
  scorecard,metric,target,actual,status,owner
  vto,category,item,complete
  issue,title,description,priority,department,owner,status,created,due
  todo,title,description,priority,assignee,dueDate,complete
        """
    )

    parser.add_argument("file", nargs="?", help="CSV or XLSX file to import")
    parser.add_argument(
        "--db",
        default="data/tractionboard.db",
        help="SQLite database path (default: data/tractionboard.db)"
    )
    parser.add_argument(
        "--mode",
        choices=IMPORT_MODES,
        default="append",
        help="append rows, or replace the families present in the file"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the classified rows as JSON without writing"
    )
    parser.add_argument(
        "--template",
        action="store_true",
        help="Print the sample CSV template and exit"
    )

    args = parser.parse_args(argv)

    if args.template:
        sys.stdout.write(SAMPLE_CSV)
        return 0

    if not args.file:
        parser.error("a file is required unless --template is given")

    try:
        result = load_result(args.file)

        if args.dry_run:
            output = {
                "counts": result.counts(),
                "skipped": [{"line": r.line, "reason": r.reason} for r in result.skipped],
                "data": result.to_dict(),
            }
            print(json.dumps(output, indent=2))
            return 0

        Path(args.db).parent.mkdir(parents=True, exist_ok=True)
        summary = import_into(args.db, result, mode=args.mode)
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    except IngestionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
