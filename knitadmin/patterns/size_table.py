"""
Size-Detail Table

Grid of measurement items (rows) by size ranges (columns), holding the
raw text an operator typed or pasted. Flattening it back to a template's
size_details turns blank cells into 0.
"""
from typing import Dict, List, Optional

from ..db import SizeRange
from .errors import InvalidSizeValueError, UnknownMeasurementItemError
from .sizes import SIZE_RANGES, parse_size_range


def _format_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SizeDetailTable:
    """Rows = rule items in rule order, columns = all size ranges in order."""

    def __init__(self, items: List[str], size_ranges: Optional[List[SizeRange]] = None):
        self.items = list(items)
        self.size_ranges = list(size_ranges or SIZE_RANGES)
        self._cells: Dict[str, Dict[str, str]] = {
            size.value: {item: "" for item in self.items} for size in self.size_ranges
        }

    @classmethod
    def from_size_details(cls, items: List[str], size_details: Optional[List[Dict]]) -> "SizeDetailTable":
        """Project stored size_details into the grid; unknown rows/columns are ignored."""
        table = cls(items)
        for detail in size_details or []:
            size_key = parse_size_range(detail["size_range"]).value
            if size_key not in table._cells:
                continue
            for item, value in (detail.get("measurements") or {}).items():
                if item in table._cells[size_key]:
                    table._cells[size_key][item] = _format_value(value)
        return table

    @property
    def row_count(self) -> int:
        return len(self.items)

    @property
    def column_count(self) -> int:
        return len(self.size_ranges)

    def get_cell(self, size_range, item: str) -> str:
        return self._cells[parse_size_range(size_range).value][item]

    def set_cell(self, size_range, item: str, value) -> None:
        size_key = parse_size_range(size_range).value
        if item not in self._cells.get(size_key, {}):
            raise UnknownMeasurementItemError([item])
        self._cells[size_key][item] = _format_value(value).strip()

    def set_cells(self, cells: Dict[str, Dict[str, Optional[str]]]) -> None:
        for size_range, row in cells.items():
            for item, value in row.items():
                self.set_cell(size_range, item, value)

    def paste(self, text: str, row: int, col: int) -> int:
        """Spreadsheet paste anchored at (row, col).

        Rows split on newlines, columns on tabs. Values that land outside
        the grid are dropped.

        Returns:
            Number of cells written
        """
        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()

        written = 0
        for row_offset, line in enumerate(lines):
            target_row = row + row_offset
            if not 0 <= target_row < self.row_count:
                continue
            item = self.items[target_row]
            for col_offset, value in enumerate(line.split("\t")):
                target_col = col + col_offset
                if not 0 <= target_col < self.column_count:
                    continue
                self._cells[self.size_ranges[target_col].value][item] = value.strip()
                written += 1

        return written

    def grid(self) -> Dict[str, Dict[str, str]]:
        return {size: dict(row) for size, row in self._cells.items()}

    def rows(self) -> List[List[str]]:
        """Cell text row by row, as the table renders it."""
        return [
            [self._cells[size.value][item] for size in self.size_ranges]
            for item in self.items
        ]

    def to_size_details(self) -> List[Dict]:
        details = []
        for size in self.size_ranges:
            measurements = {}
            for item in self.items:
                raw = self._cells[size.value][item]
                if raw == "":
                    measurements[item] = 0.0
                    continue
                try:
                    measurements[item] = float(raw)
                except ValueError:
                    raise InvalidSizeValueError(size.value, item, raw)
            details.append({"size_range": size.value, "measurements": measurements})
        return details
