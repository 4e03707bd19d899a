"""
Personal Sheet Row Layout
=========================

Each personal sheet row is 16 columns (A-P):

    A  date (lookup key, never written)
    B  -
    C  product
    D  packaging start        J  machine start
    E  packaging end          K  machine end
    F  packaging break        L  machine break
    G  -                      M  -
    H  packaging count        N  machine count
    I  -                      O  -
                              P  remarks

Unlabelled columns are reserved for the sheet's own formulas and are never
written. Writes only ever target the contiguous writable blocks C:F, H,
J:L, N and P.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, List, Tuple

ROW_WIDTH = 16

COL_DATE = 0
COL_PRODUCT = 2
COL_PACKAGING_START = 3
COL_PACKAGING_END = 4
COL_PACKAGING_BREAK = 5
COL_PACKAGING_COUNT = 7
COL_MACHINE_START = 9
COL_MACHINE_END = 10
COL_MACHINE_BREAK = 11
COL_MACHINE_COUNT = 13
COL_REMARKS = 15

RESERVED_COLUMNS = (1, 6, 8, 12, 14)

# SheetRow field -> 0-based column
FIELD_COLUMNS: Dict[str, int] = {
    'product': COL_PRODUCT,
    'packaging_start': COL_PACKAGING_START,
    'packaging_end': COL_PACKAGING_END,
    'packaging_break': COL_PACKAGING_BREAK,
    'packaging_count': COL_PACKAGING_COUNT,
    'machine_start': COL_MACHINE_START,
    'machine_end': COL_MACHINE_END,
    'machine_break': COL_MACHINE_BREAK,
    'machine_count': COL_MACHINE_COUNT,
    'remarks': COL_REMARKS,
}

WRITABLE_COLUMNS = tuple(sorted(FIELD_COLUMNS.values()))


def get_column_letter(col_num):
    """
    Convert column number to Excel-style column letter
    1 -> A, 26 -> Z, 27 -> AA, etc.

    Args:
        col_num: Column number (1-indexed)

    Returns:
        Column letter(s)
    """
    result = ""
    while col_num > 0:
        col_num -= 1
        result = chr(col_num % 26 + 65) + result
        col_num //= 26
    return result


def contiguous_blocks(columns) -> List[Tuple[int, int]]:
    """Group sorted 0-based column indexes into inclusive (first, last) runs."""
    blocks: List[Tuple[int, int]] = []
    for col in sorted(columns):
        if blocks and col == blocks[-1][1] + 1:
            blocks[-1] = (blocks[-1][0], col)
        else:
            blocks.append((col, col))
    return blocks


WRITABLE_BLOCKS = contiguous_blocks(WRITABLE_COLUMNS)

FULL_ROW_RANGE = f"A{{row}}:{get_column_letter(ROW_WIDTH)}{{row}}"

# Every row of the sheet, all 16 columns
SHEET_RANGE = f"A:{get_column_letter(ROW_WIDTH)}"


def full_row_range(row_index: int) -> str:
    """'A5:P5' for row 5."""
    return FULL_ROW_RANGE.format(row=row_index)


@dataclass
class SheetRow:
    """Named view over one 16-column personal sheet row."""
    date: str = ''
    product: str = ''
    packaging_start: str = ''
    packaging_end: str = ''
    packaging_break: str = ''
    packaging_count: str = ''
    machine_start: str = ''
    machine_end: str = ''
    machine_break: str = ''
    machine_count: str = ''
    remarks: str = ''

    @classmethod
    def from_cells(cls, cells: List) -> 'SheetRow':
        """Build from a row as returned by the API (may be shorter than 16)."""
        padded = [('' if c is None else str(c)) for c in cells[:ROW_WIDTH]]
        padded += [''] * (ROW_WIDTH - len(padded))
        values = {name: padded[col] for name, col in FIELD_COLUMNS.items()}
        return cls(date=padded[COL_DATE], **values)

    def to_cells(self) -> List[str]:
        """Positional 16-cell list; reserved cells are blank."""
        cells = [''] * ROW_WIDTH
        cells[COL_DATE] = self.date
        for name, col in FIELD_COLUMNS.items():
            cells[col] = getattr(self, name)
        return cells

    def merged_with(self, new: 'SheetRow') -> 'SheetRow':
        """
        Overlay `new` onto this row: a field changes only when `new`
        supplies a non-empty value. The date is always kept.
        """
        merged = {}
        for f in fields(self):
            if f.name == 'date':
                merged[f.name] = self.date
                continue
            new_value = getattr(new, f.name)
            merged[f.name] = new_value if new_value else getattr(self, f.name)
        return SheetRow(**merged)

    def range_updates(self, row_index: int, skip_blank: bool = False) -> List[Dict]:
        """
        One update per writable block, e.g. C5:F5, H5, J5:L5, N5, P5.
        Date and reserved columns never appear.

        With skip_blank, empty fields are left out and the remaining
        columns are regrouped, so only cells that carry a value are written.
        """
        cells = self.to_cells()
        blocks = WRITABLE_BLOCKS
        if skip_blank:
            blocks = contiguous_blocks(col for col in WRITABLE_COLUMNS if cells[col] != '')
        updates = []
        for first, last in blocks:
            start_letter = get_column_letter(first + 1)
            end_letter = get_column_letter(last + 1)
            if first == last:
                a1 = f"{start_letter}{row_index}"
            else:
                a1 = f"{start_letter}{row_index}:{end_letter}{row_index}"
            updates.append({'range': a1, 'values': [cells[first:last + 1]]})
        return updates
