"""
Row Reconciler
==============

Upserts one worker's corrected records into that worker's personal sheet
for the pay period of the work date.

Per worker the flow is strictly sequential:

    resolve sheet -> find row by date -> merge or create -> write

A missing personal sheet is a soft outcome (NO_SHEET) reported back to the
caller. Every other failure is a StoreError that propagates.

The date column is the lookup key and is never written, on merge or on
create. A new row goes below the last row that holds anything in A:P, and
only its non-empty fields are written. Writes are split into the writable
column blocks so reserved columns (formulas) are structurally out of reach.
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import config
from correction.models import Header, WorkerRecord, WorkType
from reconcile.interval_consolidator import consolidate, format_slots, minutes_to_time, validate_slots
from reconcile.retry import call_with_retry
from reconcile.work_period import (
    PeriodKey,
    normalize_work_date,
    parse_work_date,
    period_for_date,
    personal_sheet_name,
)
from sheets.row_layout import SHEET_RANGE, SheetRow, full_row_range
from utils.logger import get_logger


class ReconcileStatus(Enum):
    WRITTEN_NEW = 'written_new'
    MERGED = 'merged'
    NO_SHEET = 'no_sheet'
    SKIPPED = 'skipped'


@dataclass
class ReconcileOutcome:
    worker_name: str
    status: ReconcileStatus
    sheet_name: str = ''
    row_index: Optional[int] = None
    ranges: List[str] = field(default_factory=list)

    @property
    def is_written(self) -> bool:
        return self.status in (ReconcileStatus.WRITTEN_NEW, ReconcileStatus.MERGED)

    def to_dict(self):
        return {
            'worker_name': self.worker_name,
            'status': self.status.value,
            'sheet_name': self.sheet_name,
            'row_index': self.row_index,
            'ranges': list(self.ranges),
        }


def break_duration(record: WorkerRecord) -> str:
    """Total break as H:MM, or '' when no break was taken."""
    minutes = 0
    if record.breaks.lunch:
        minutes += config.LUNCH_BREAK_MINUTES
    if record.breaks.mid:
        minutes += config.MID_BREAK_MINUTES
    return minutes_to_time(minutes) if minutes else ''


def _work_interval(record: WorkerRecord):
    """(start, end) for the payroll columns."""
    if len(record.slots) > 1:
        interval = consolidate(record.slots)
        return interval.start, interval.end
    if record.slots:
        return record.slots[0].start, record.slots[0].end
    return '', ''


def build_remarks(packaging: Optional[WorkerRecord], machine: Optional[WorkerRecord]) -> str:
    """Original fragments for every work type that had more than one slot."""
    parts = []
    for record, label in ((packaging, config.PACKAGING_REMARK_LABEL),
                          (machine, config.MACHINE_REMARK_LABEL)):
        if record is not None and len(record.slots) > 1:
            parts.append(f"{label}: {format_slots(record.slots)}")
    return config.REMARK_SEPARATOR.join(parts)


def build_row_from_records(header: Header,
                           packaging: Optional[WorkerRecord],
                           machine: Optional[WorkerRecord]) -> SheetRow:
    """
    Fresh row for one worker. Fields without data stay blank, so the same
    row can be overlaid onto an existing one with SheetRow.merged_with.
    """
    row = SheetRow(product=header.product)
    if packaging is not None:
        row.packaging_start, row.packaging_end = _work_interval(packaging)
        row.packaging_break = break_duration(packaging)
        row.packaging_count = packaging.produced_count
    if machine is not None:
        row.machine_start, row.machine_end = _work_interval(machine)
        row.machine_break = break_duration(machine)
        row.machine_count = machine.produced_count
    row.remarks = build_remarks(packaging, machine)
    return row


def next_free_row(rows: List[List[str]]) -> int:
    """1-based row just below the last row with any non-blank cell."""
    last_used = 0
    for index, row in enumerate(rows, start=1):
        if any(str(cell).strip() for cell in row if cell is not None):
            last_used = index
    return last_used + 1


def check_record_times(records):
    """Raise InvalidTimeSlotError before any write if a record cannot be consolidated."""
    for record in records:
        if record is not None:
            validate_slots(record.slots)


def find_row_by_date(date_column: List[List[str]], work_date: str) -> Optional[int]:
    """
    1-based row whose column A holds `work_date`.

    Exact string match top-down first; failing that, both sides are
    normalized to M/D and compared again.
    """
    cells = [str(row[0]).strip() if row else '' for row in date_column]
    for index, cell in enumerate(cells, start=1):
        if cell == work_date:
            return index

    target = normalize_work_date(work_date)
    for index, cell in enumerate(cells, start=1):
        if cell and normalize_work_date(cell) == target:
            return index
    return None


class RowReconciler:
    """Reconciles one worker at a time against an injected row store."""

    def __init__(self, store, max_attempts: Optional[int] = None,
                 base_delay: Optional[float] = None, sleep=asyncio.sleep):
        self.store = store
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep
        self.logger = get_logger()

    async def _call(self, func, *args, **kwargs):
        return await call_with_retry(
            func, *args,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            sleep=self.sleep,
            **kwargs,
        )

    async def resolve_sheet(self, worker_name: str, period: PeriodKey) -> Optional[str]:
        """Exact personal sheet name, or None when it has not been provisioned."""
        sheet_name = personal_sheet_name(worker_name, period)
        names = await self._call(self.store.list_sheet_names)
        if sheet_name in names:
            return sheet_name
        self.logger.warning(f"Personal sheet '{sheet_name}' not found", component="Reconciler")
        return None

    async def reconcile(self, worker_name: str, header: Header,
                        packaging: Optional[WorkerRecord] = None,
                        machine: Optional[WorkerRecord] = None) -> ReconcileOutcome:
        """
        Upsert one worker's row.

        Raises:
            InvalidWorkDateError: header work date cannot be parsed
            InvalidTimeSlotError: a multi-slot record has a time that is not H:MM
            StoreError: any store failure other than a missing sheet
        """
        if packaging is None and machine is None:
            return ReconcileOutcome(worker_name, ReconcileStatus.SKIPPED)

        period = period_for_date(parse_work_date(header.work_date))
        check_record_times((packaging, machine))
        sheet_name = await self.resolve_sheet(worker_name, period)
        if sheet_name is None:
            return ReconcileOutcome(worker_name, ReconcileStatus.NO_SHEET,
                                    sheet_name=personal_sheet_name(worker_name, period))

        work_date = normalize_work_date(header.work_date)
        rows = await self._call(self.store.read_column_range, sheet_name, SHEET_RANGE)
        row_index = find_row_by_date([row[:1] for row in rows], work_date)
        new_row = build_row_from_records(header, packaging, machine)

        if row_index is not None:
            existing_cells = await self._call(
                self.store.read_column_range, sheet_name, full_row_range(row_index),
                value_render_option='FORMULA',
            )
            existing = SheetRow.from_cells(existing_cells[0] if existing_cells else [])
            row = existing.merged_with(new_row)
            status = ReconcileStatus.MERGED
        else:
            row_index = next_free_row(rows)
            row = new_row
            status = ReconcileStatus.WRITTEN_NEW

        updates = row.range_updates(row_index, skip_blank=(status == ReconcileStatus.WRITTEN_NEW))
        await self._call(self.store.write_column_ranges, sheet_name, updates)

        ranges = [u['range'] for u in updates]
        self.logger.log_row_write(sheet_name, row_index, status.value, ranges)
        return ReconcileOutcome(worker_name, status, sheet_name=sheet_name,
                                row_index=row_index, ranges=ranges)


def records_by_type(records: List[WorkerRecord]):
    """First packaging and first machine record from a worker's records."""
    packaging = next((r for r in records if r.work_type == WorkType.PACKAGING), None)
    machine = next((r for r in records if r.work_type == WorkType.MACHINE), None)
    return packaging, machine
