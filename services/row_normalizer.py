"""
Spreadsheet row normalization and sheet-name category classification.

Both are pure functions so the importer can run them on worker threads.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.category import CategoryType

# Required columns, by header name
COLUMN_MEMBER_ID1 = "Member ID1"
COLUMN_MEMBER_ID2 = "Member ID2"
COLUMN_PLAYER1 = "Player1"
COLUMN_PLAYER2 = "Player2"
COLUMN_POSITION = "Position"
COLUMN_POSITION2 = "Position2"

# A sheet name containing any of these (case-insensitive) is a doubles category
DOUBLES_INDICATORS = ("d", "doubles", "double", "gd", "bd", "xd", "md", "wd")

# Header row is row 1, so data row index 0 is spreadsheet row 2
FIRST_DATA_ROW = 2

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def classify_category(sheet_name: Optional[str]) -> CategoryType:
    """Map a sheet name onto a category type; anything unrecognised is singles"""
    if not sheet_name:
        return CategoryType.SINGLES
    name = sheet_name.lower().strip()
    for indicator in DOUBLES_INDICATORS:
        if indicator in name:
            return CategoryType.DOUBLES
    return CategoryType.SINGLES


@dataclass
class PlayerResultDraft:
    category: str
    row_index: int
    external_id1: str
    external_id2: str
    player1: str
    player2: str
    position: int
    position2: int


@dataclass
class RowError:
    category: str
    row_index: int
    reason: str
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "row_index": self.row_index,
            "reason": self.reason,
            "data": self.data,
        }


class RowRejected(Exception):
    def __init__(self, error: RowError):
        self.error = error
        super().__init__(error.reason)


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    # openpyxl hands back floats for numeric member ids typed as 12345.0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _cell_int(value: Any) -> Optional[int]:
    """Leading-integer parse of a cell; None when nothing numeric is present"""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def normalize_row(row: Dict[str, Any], index: int, sheet_name: str,
                  category_type: CategoryType) -> PlayerResultDraft:
    """
    Turn one raw spreadsheet row into a PlayerResultDraft.

    Args:
        row: header -> cell mapping for the row
        index: 0-based data row index within the sheet
        sheet_name: owning sheet (= category display name)
        category_type: result of classify_category(sheet_name)

    Raises:
        RowRejected: when the names required by the category's arity are missing
    """
    external_id1 = _cell_text(row.get(COLUMN_MEMBER_ID1))
    external_id2 = _cell_text(row.get(COLUMN_MEMBER_ID2))
    player1 = _cell_text(row.get(COLUMN_PLAYER1))
    player2 = _cell_text(row.get(COLUMN_PLAYER2))

    position = _cell_int(row.get(COLUMN_POSITION))
    if position is None:
        position = 0
    position2 = _cell_int(row.get(COLUMN_POSITION2))
    if position2 is None:
        position2 = position

    row_number = index + FIRST_DATA_ROW

    if category_type == CategoryType.DOUBLES:
        if not player1 or not player2:
            raise RowRejected(RowError(
                category=sheet_name,
                row_index=row_number,
                reason="Missing required player names for doubles",
                data={"player1": player1, "player2": player2},
            ))
    elif not player1:
        raise RowRejected(RowError(
            category=sheet_name,
            row_index=row_number,
            reason="Missing required player name for singles",
            data={"player1": player1},
        ))

    return PlayerResultDraft(
        category=sheet_name,
        row_index=row_number,
        external_id1=external_id1,
        external_id2=external_id2 if category_type == CategoryType.DOUBLES else "",
        player1=player1,
        player2=player2 if category_type == CategoryType.DOUBLES else "",
        position=position,
        position2=position2,
    )
