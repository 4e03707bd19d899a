"""
Tests for sheets.row_layout

Covers: column letters, writable block grouping, SheetRow conversion,
overlay merge and the range updates sent to the store.
"""
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from sheets.row_layout import (
    COL_DATE,
    COL_PACKAGING_COUNT,
    RESERVED_COLUMNS,
    ROW_WIDTH,
    SHEET_RANGE,
    WRITABLE_BLOCKS,
    WRITABLE_COLUMNS,
    SheetRow,
    contiguous_blocks,
    full_row_range,
    get_column_letter,
)


class TestColumnLetters(unittest.TestCase):
    def test_letters(self):
        self.assertEqual(get_column_letter(1), 'A')
        self.assertEqual(get_column_letter(16), 'P')
        self.assertEqual(get_column_letter(26), 'Z')
        self.assertEqual(get_column_letter(27), 'AA')

    def test_full_row_range(self):
        self.assertEqual(full_row_range(5), 'A5:P5')


class TestLayout(unittest.TestCase):
    def test_date_and_reserved_not_writable(self):
        self.assertNotIn(COL_DATE, WRITABLE_COLUMNS)
        for col in RESERVED_COLUMNS:
            self.assertNotIn(col, WRITABLE_COLUMNS)

    def test_every_column_accounted_for(self):
        all_cols = set(WRITABLE_COLUMNS) | set(RESERVED_COLUMNS) | {COL_DATE}
        self.assertEqual(all_cols, set(range(ROW_WIDTH)))

    def test_blocks(self):
        self.assertEqual(WRITABLE_BLOCKS, [(2, 5), (7, 7), (9, 11), (13, 13), (15, 15)])

    def test_contiguous_blocks_unsorted_input(self):
        self.assertEqual(contiguous_blocks([3, 1, 2, 7]), [(1, 3), (7, 7)])


class TestSheetRow(unittest.TestCase):
    def _cells(self):
        cells = [''] * ROW_WIDTH
        cells[0] = '3/21'
        cells[1] = '=WEEKDAY(A5)'
        cells[2] = 'ボールペン'
        cells[3] = '9:00'
        cells[7] = '100'
        return cells

    def test_from_cells_short_row(self):
        row = SheetRow.from_cells(['3/21', '', 'ボールペン'])
        self.assertEqual(row.date, '3/21')
        self.assertEqual(row.product, 'ボールペン')
        self.assertEqual(row.remarks, '')

    def test_from_cells_none_and_numbers(self):
        row = SheetRow.from_cells(['3/21', None, None, None, None, None, None, 120])
        self.assertEqual(row.packaging_count, '120')
        self.assertEqual(row.product, '')

    def test_to_cells_blanks_reserved(self):
        cells = SheetRow.from_cells(self._cells()).to_cells()
        self.assertEqual(len(cells), ROW_WIDTH)
        self.assertEqual(cells[1], '')
        self.assertEqual(cells[COL_PACKAGING_COUNT], '100')

    def test_merge_overlays_only_non_empty(self):
        existing = SheetRow.from_cells(self._cells())
        merged = existing.merged_with(SheetRow(packaging_count='150'))
        self.assertEqual(merged.date, '3/21')
        self.assertEqual(merged.product, 'ボールペン')
        self.assertEqual(merged.packaging_start, '9:00')
        self.assertEqual(merged.packaging_count, '150')

    def test_merge_never_takes_new_date(self):
        merged = SheetRow(date='3/21').merged_with(SheetRow(date='9/9', product='x'))
        self.assertEqual(merged.date, '3/21')

    def test_range_updates(self):
        row = SheetRow(product='p', packaging_start='9:00', packaging_end='17:00',
                       packaging_break='1:00', packaging_count='10',
                       machine_start='8:00', machine_end='12:00', machine_break='',
                       machine_count='5', remarks='r')
        updates = row.range_updates(7)
        self.assertEqual([u['range'] for u in updates], ['C7:F7', 'H7', 'J7:L7', 'N7', 'P7'])
        self.assertEqual(updates[0]['values'], [['p', '9:00', '17:00', '1:00']])
        self.assertEqual(updates[1]['values'], [['10']])
        self.assertEqual(updates[2]['values'], [['8:00', '12:00', '']])
        self.assertEqual(updates[4]['values'], [['r']])

    def test_range_updates_skip_blank(self):
        row = SheetRow(date='3/21', product='p', packaging_end='17:00',
                       packaging_count='10', machine_start='8:00', machine_end='12:00')
        updates = row.range_updates(4, skip_blank=True)
        self.assertEqual([u['range'] for u in updates], ['C4', 'E4', 'H4', 'J4:K4'])
        self.assertEqual(updates[3]['values'], [['8:00', '12:00']])

    def test_range_updates_skip_blank_empty_row(self):
        self.assertEqual(SheetRow(date='3/21').range_updates(4, skip_blank=True), [])

    def test_sheet_range(self):
        self.assertEqual(SHEET_RANGE, 'A:P')

    def test_range_updates_never_include_date(self):
        updates = SheetRow(date='3/21').range_updates(2)
        for update in updates:
            self.assertFalse(update['range'].startswith('A'))
            self.assertNotIn('3/21', update['values'][0])


if __name__ == '__main__':
    unittest.main()
