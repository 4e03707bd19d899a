"""
In-memory stand-ins for the Google Sheets row store.

Rows are stored as lists of cell strings per tab. Reads mimic the Sheets
API: trailing empty cells and rows are dropped.
"""
import re
import threading

from sheets.row_layout import ROW_WIDTH

_A1 = re.compile(r'^([A-Z]+)(\d*)(?::([A-Z]+)(\d*))?$')


def column_index(letters):
    """'A' -> 0, 'P' -> 15, 'AA' -> 26"""
    index = 0
    for ch in letters:
        index = index * 26 + (ord(ch) - 64)
    return index - 1


def parse_a1(a1_range):
    """Return (first_col, last_col, first_row or None, last_row or None), 0-based cols."""
    match = _A1.match(a1_range)
    if not match:
        raise ValueError(f"Unsupported range {a1_range}")
    start_col, start_row, end_col, end_row = match.groups()
    end_col = end_col or start_col
    end_row = end_row or start_row
    return (
        column_index(start_col),
        column_index(end_col),
        int(start_row) if start_row else None,
        int(end_row) if end_row else None,
    )


def _trim(cells):
    cells = list(cells)
    while cells and cells[-1] in ('', None):
        cells.pop()
    return cells


class InMemoryRowStore:
    """Row store protocol backed by dicts; records every call."""

    def __init__(self, sheets=None):
        self.sheets = {
            name: [list(row) + [''] * (ROW_WIDTH - len(row)) for row in rows]
            for name, rows in (sheets or {}).items()
        }
        self.calls = []
        self.failures = {}
        self._lock = threading.Lock()

    def fail(self, method, error, sheet_name=None, times=1):
        """Raise `error` on the next `times` calls of `method` (optionally per sheet)."""
        self.failures.setdefault((method, sheet_name), []).extend([error] * times)

    def _maybe_fail(self, method, sheet_name=None):
        with self._lock:
            for key in ((method, sheet_name), (method, None)):
                pending = self.failures.get(key)
                if pending:
                    raise pending.pop(0)

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def writes_for(self, sheet_name):
        return [c for c in self.calls if c[0] == 'write' and c[1] == sheet_name]

    def list_sheet_names(self):
        self._record('list')
        self._maybe_fail('list_sheet_names')
        return list(self.sheets)

    def read_column_range(self, sheet_name, a1_range, value_render_option=None):
        self._record('read', sheet_name, a1_range, value_render_option)
        self._maybe_fail('read_column_range', sheet_name)
        rows = self.sheets[sheet_name]
        first_col, last_col, first_row, last_row = parse_a1(a1_range)
        first_row = first_row or 1
        last_row = last_row or len(rows)
        values = []
        for row in rows[first_row - 1:last_row]:
            values.append(_trim(row[first_col:last_col + 1]))
        while values and not values[-1]:
            values.pop()
        return values

    def write_column_ranges(self, sheet_name, updates):
        self._record('write', sheet_name, [u['range'] for u in updates])
        self._maybe_fail('write_column_ranges', sheet_name)
        rows = self.sheets[sheet_name]
        for update in updates:
            first_col, last_col, row_index, _ = parse_a1(update['range'])
            while len(rows) < row_index:
                rows.append([''] * ROW_WIDTH)
            cells = update['values'][0]
            for offset, col in enumerate(range(first_col, last_col + 1)):
                rows[row_index - 1][col] = cells[offset]

    def cell(self, sheet_name, row_index, col):
        return self.sheets[sheet_name][row_index - 1][col]
