"""
Tests for batch_engine.batch_orchestrator

Covers: per-worker fan-out, missing-sheet partial success, hard errors
raised only after every task settles, and up-front date validation.
All Sheets access goes through an in-memory store.
"""
import asyncio
import os
import sys
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'tests'))

from batch_engine.batch_orchestrator import BatchOrchestrator, group_by_worker
from correction.models import Header, TimeSlot, WorkerRecord, WorkType
from fakes import InMemoryRowStore
from reconcile.interval_consolidator import InvalidTimeSlotError
from reconcile.row_reconciler import ReconcileOutcome, ReconcileStatus, RowReconciler
from reconcile.work_period import InvalidWorkDateError
from sheets.row_layout import COL_MACHINE_COUNT, COL_PACKAGING_COUNT
from sheets.store_errors import PermissionDeniedError


async def _no_sleep(delay):
    return None


def _record(name, work_type=WorkType.PACKAGING, count='10'):
    return WorkerRecord(name=name, work_type=work_type,
                        slots=[TimeSlot('9:00', '17:00')], produced_count=count)


def _sheet(name):
    return f'{name}_2025年3月'


class TestGroupByWorker(unittest.TestCase):
    def test_first_appearance_order_and_blank_names(self):
        workers = [
            _record('B'), _record(''), _record('A'),
            _record('B', WorkType.MACHINE), _record('  '),
        ]
        grouped = group_by_worker(workers)
        self.assertEqual(list(grouped), ['B', 'A'])
        self.assertEqual(len(grouped['B']), 2)


class TestSaveAll(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryRowStore({
            _sheet('山田 太郎'): [['日付'], ['3/25']],
            _sheet('田中 一郎'): [['日付']],
        })
        reconciler = RowReconciler(self.store, max_attempts=3, base_delay=0.0, sleep=_no_sleep)
        self.orchestrator = BatchOrchestrator(reconciler)
        self.header = Header(work_date='2025-03-25', product='ボールペン')

    def test_missing_sheet_reported_not_raised(self):
        workers = [_record('山田 太郎'), _record('鈴木 花子'), _record('田中 一郎')]
        result = asyncio.run(self.orchestrator.save_all(self.header, workers))

        self.assertEqual(result.failed_workers, ['鈴木 花子'])
        self.assertEqual(result.written_count, 2)
        self.assertEqual(result.period_label, '2025年3月')
        self.assertEqual(result.outcome_for('山田 太郎').status, ReconcileStatus.MERGED)
        self.assertEqual(result.outcome_for('田中 一郎').status, ReconcileStatus.WRITTEN_NEW)
        self.assertEqual(self.store.cell(_sheet('山田 太郎'), 2, COL_PACKAGING_COUNT), '10')
        self.assertEqual(self.store.cell(_sheet('田中 一郎'), 2, COL_PACKAGING_COUNT), '10')

    def test_both_work_types_land_in_one_row(self):
        workers = [
            _record('山田 太郎', WorkType.PACKAGING, '10'),
            _record('山田 太郎', WorkType.MACHINE, '7'),
        ]
        result = asyncio.run(self.orchestrator.save_all(self.header, workers))

        self.assertTrue(result.is_complete)
        self.assertEqual(len(self.store.writes_for(_sheet('山田 太郎'))), 1)
        self.assertEqual(self.store.cell(_sheet('山田 太郎'), 2, COL_PACKAGING_COUNT), '10')
        self.assertEqual(self.store.cell(_sheet('山田 太郎'), 2, COL_MACHINE_COUNT), '7')

    def test_hard_error_raised_after_siblings_finish(self):
        self.store.fail('write_column_ranges', PermissionDeniedError('denied', status=403),
                        sheet_name=_sheet('山田 太郎'))
        workers = [_record('山田 太郎'), _record('田中 一郎')]

        with self.assertRaises(PermissionDeniedError):
            asyncio.run(self.orchestrator.save_all(self.header, workers))

        # the sibling still completed its write
        self.assertEqual(len(self.store.writes_for(_sheet('田中 一郎'))), 1)
        self.assertEqual(self.store.cell(_sheet('田中 一郎'), 2, COL_PACKAGING_COUNT), '10')

    def test_first_error_in_worker_order(self):
        reconciler = MagicMock()

        async def reconcile(name, header, packaging, machine):
            if name == 'A':
                await asyncio.sleep(0.01)
                raise PermissionDeniedError('A failed', status=403)
            if name == 'B':
                raise RuntimeError('B failed')
            return ReconcileOutcome(name, ReconcileStatus.MERGED)

        reconciler.reconcile.side_effect = reconcile
        orchestrator = BatchOrchestrator(reconciler)

        with self.assertRaises(PermissionDeniedError):
            asyncio.run(orchestrator.save_all(self.header, [_record('A'), _record('B'), _record('C')]))
        self.assertEqual(reconciler.reconcile.call_count, 3)

    def test_invalid_date_before_any_store_call(self):
        with self.assertRaises(InvalidWorkDateError):
            asyncio.run(self.orchestrator.save_all(Header(work_date='13/45'), [_record('山田 太郎')]))
        self.assertEqual(self.store.calls, [])

    def test_bad_slot_time_rejected_before_any_write(self):
        bad = WorkerRecord(name='山田 太郎', work_type=WorkType.PACKAGING,
                           slots=[TimeSlot('9時', '12:00'), TimeSlot('13:00', '17:00')])
        with self.assertRaises(InvalidTimeSlotError):
            asyncio.run(self.orchestrator.save_all(self.header, [bad, _record('田中 一郎')]))
        self.assertEqual(self.store.writes_for(_sheet('田中 一郎')), [])
        self.assertEqual(self.store.calls, [])

    def test_no_workers(self):
        result = asyncio.run(self.orchestrator.save_all(self.header, [_record('')]))
        self.assertEqual(result.failed_workers, [])
        self.assertEqual(result.outcomes, [])
        self.assertEqual(self.store.calls, [])

    def test_save_all_sync(self):
        result = self.orchestrator.save_all_sync(self.header, [_record('鈴木 花子')])
        self.assertEqual(result.failed_workers, ['鈴木 花子'])


if __name__ == '__main__':
    unittest.main()
