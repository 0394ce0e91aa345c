"""Turn uploaded file bytes into classifier input.

- CSV: chardet encoding detection with UTF-8 BOM handling, then ``parse``
- XLSX: openpyxl in read-only mode, first worksheet, cells rendered as text
"""

from __future__ import annotations

import io
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import chardet
import openpyxl

from tractionboard.ingestion.classifier import (
    FormatError,
    ImportResult,
    IngestionError,
    classify_rows,
    parse,
)

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".csv", ".txt"}
XLSX_EXTENSIONS = {".xlsx"}
ALLOWED_EXTENSIONS = TEXT_EXTENSIONS | XLSX_EXTENSIONS


class UnsupportedFileError(IngestionError):
    """The uploaded file's extension has no reader."""


def decode_upload(raw: bytes) -> str:
    """Decode uploaded bytes to text.

    A UTF-8 BOM wins; otherwise chardet picks the encoding, falling back to
    UTF-8. Undecodable bytes are replaced rather than rejected.
    """
    if raw[:3] == b"\xef\xbb\xbf":
        return raw.decode("utf-8-sig", errors="replace")

    encoding = chardet.detect(raw).get("encoding")
    if encoding is None or encoding.lower() in ("ascii", "utf-8", "utf8"):
        encoding = "utf-8"
    return raw.decode(encoding, errors="replace")


def read_xlsx_rows(raw: bytes) -> list[list[str]]:
    """Read the first worksheet of an XLSX workbook as rows of strings.

    Fully empty rows are dropped.

    Raises:
        FormatError: If the bytes are not a readable workbook.
    """
    try:
        wb = openpyxl.load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except Exception as e:
        raise FormatError(f"Failed to open XLSX file: {e}") from e

    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            return []
        rows: list[list[str]] = []
        for values in ws.iter_rows(values_only=True):
            cells = [_cell_text(value) for value in values]
            if any(cell.strip() for cell in cells):
                rows.append(cells)
        return rows
    finally:
        wb.close()


def parse_upload(filename: str, raw: bytes) -> ImportResult:
    """Parse an uploaded file, choosing the reader from its extension.

    Raises:
        UnsupportedFileError: If the extension is not .csv, .txt or .xlsx.
        FormatError: If the content lacks a header and a data row.
    """
    suffix = Path(filename).suffix.lower()
    if suffix in TEXT_EXTENSIONS:
        return parse(decode_upload(raw))
    if suffix in XLSX_EXTENSIONS:
        rows = read_xlsx_rows(raw)
        logger.debug("Read %d non-empty rows from %s", len(rows), filename)
        return classify_rows(rows)
    raise UnsupportedFileError(
        f"Unsupported file type: '{suffix}'. "
        f"Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
    )


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
