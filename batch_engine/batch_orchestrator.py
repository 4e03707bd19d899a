"""
Batch Orchestrator

Fans the row reconciler out over every worker in a submission.
Pure orchestration -- the store is reached only through the reconciler.

One task per distinct worker name runs concurrently. Tasks are never
cancelled by a sibling's failure: every task settles, then the first hard
error (in worker order) is raised. Missing personal sheets are collected
into BatchResult.failed_workers instead.
"""
import asyncio
import os
import sys
from typing import Dict, List

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from batch_engine.batch_models import BatchResult
from correction.models import Header, WorkerRecord
from reconcile.row_reconciler import ReconcileStatus, RowReconciler, check_record_times, records_by_type
from reconcile.work_period import parse_work_date, period_for_date
from utils.logger import get_logger


def group_by_worker(workers: List[WorkerRecord]) -> Dict[str, List[WorkerRecord]]:
    """Records keyed by non-empty worker name, in first-appearance order."""
    grouped: Dict[str, List[WorkerRecord]] = {}
    for record in workers:
        name = record.name.strip()
        if not name:
            continue
        grouped.setdefault(name, []).append(record)
    return grouped


class BatchOrchestrator:
    """Saves a corrected submission to every worker's personal sheet."""

    def __init__(self, reconciler: RowReconciler):
        self.reconciler = reconciler
        self.logger = get_logger()

    async def save_all(self, header: Header, workers: List[WorkerRecord]) -> BatchResult:
        """
        Reconcile all workers concurrently.

        Returns:
            BatchResult with NO_SHEET workers in failed_workers

        Raises:
            InvalidWorkDateError: before any store call, if the date is unusable
            InvalidTimeSlotError: before any store call, if a worker's slots
                cannot be consolidated
            StoreError: first hard failure once all tasks have settled
        """
        period = period_for_date(parse_work_date(header.work_date))
        grouped = group_by_worker(workers)
        for records in grouped.values():
            check_record_times(records)
        names = list(grouped)

        self.logger.info(
            f"Saving {len(names)} worker(s) for {header.work_date} ({period.label})",
            component="Batch"
        )

        tasks = []
        for name in names:
            packaging, machine = records_by_type(grouped[name])
            tasks.append(self.reconciler.reconcile(name, header, packaging, machine))

        results = await asyncio.gather(*tasks, return_exceptions=True)

        result = BatchResult(period_label=period.label)
        first_error = None
        for name, outcome in zip(names, results):
            if isinstance(outcome, BaseException):
                self.logger.error(f"Worker '{name}' failed: {outcome}", component="Batch")
                if first_error is None:
                    first_error = outcome
                continue
            result.outcomes.append(outcome)
            if outcome.status == ReconcileStatus.NO_SHEET:
                result.failed_workers.append(name)

        if first_error is not None:
            raise first_error

        self.logger.log_batch_summary(
            header.work_date, len(names), result.written_count, result.failed_workers
        )
        return result

    def save_all_sync(self, header: Header, workers: List[WorkerRecord]) -> BatchResult:
        """Blocking wrapper for callers without an event loop (CLI)."""
        return asyncio.run(self.save_all(header, workers))
