import hashlib
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict, List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.exceptions import InvalidSpreadsheet


@dataclass
class Sheet:
    """One worksheet: the sheet name is the category display name."""
    name: str
    rows: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class Workbook:
    sheets: List[Sheet] = field(default_factory=list)

    @property
    def sheet_names(self) -> List[str]:
        return [sheet.name for sheet in self.sheets]


def content_digest(content: bytes) -> str:
    """SHA-256 hex digest of the uploaded file bytes"""
    return hashlib.sha256(content).hexdigest()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _sheet_rows(worksheet) -> List[Dict[str, Any]]:
    rows = worksheet.iter_rows(values_only=True)
    header = next(rows, None)
    if header is None:
        return []

    columns = [str(cell).strip() if cell is not None else None for cell in header]
    records = []
    for values in rows:
        record = {}
        for column, value in zip(columns, values):
            if column and not _is_blank(value):
                record[column] = value
        # Fully blank rows are skipped
        if record:
            records.append(record)
    return records


def read_workbook(content: bytes) -> Workbook:
    """
    Parse .xlsx bytes into a Workbook of header-keyed rows.

    The first row of every sheet is the header row. Empty cells are omitted
    from the row mapping.
    """
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise InvalidSpreadsheet(f"File is not a readable .xlsx workbook: {e}")

    try:
        sheets = [Sheet(name=ws.title, rows=_sheet_rows(ws)) for ws in wb.worksheets]
    finally:
        wb.close()
    return Workbook(sheets=sheets)
