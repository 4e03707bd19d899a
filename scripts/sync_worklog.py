#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Worklog Sync CLI Tool
Corrects an OCR result file against master data and optionally saves it
to the workers' personal sheets.

Usage:
    python scripts/sync_worklog.py <ocr.json>                 # show corrections
    python scripts/sync_worklog.py <ocr.json> --save          # save if nothing is flagged
    python scripts/sync_worklog.py <ocr.json> --save --force  # save flagged corrections too
"""
import json
import sys
from pathlib import Path

# Fix encoding for Windows
if sys.platform == 'win32':
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

# Add src and project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))
sys.path.insert(0, str(PROJECT_ROOT))


def _confidence_mark(correction):
    if correction is None:
        return '  '
    return '⚠️' if correction.low_confidence_flag else '✅'


def print_corrections(submission):
    """Print the corrected header and worker names"""
    header = submission.header
    print("\n" + "="*80)
    print(f"WORKLOG {header.work_date}  {header.factory}")
    print("="*80 + "\n")

    pc = header.correction
    original = pc.original_product if pc and pc.original_product else header.product
    confidence = pc.confidence if pc else 0.0
    print(f"{_confidence_mark(pc)} Product: {original} -> {header.product} ({confidence:.2f})")

    print("\n👥 Workers:")
    for worker in submission.workers:
        nc = worker.correction
        before = nc.original_name if nc and nc.original_name else worker.name
        confidence = nc.confidence if nc else 0.0
        kind = nc.kind.value if nc else '-'
        slots = ', '.join(f"{s.start}-{s.end}" for s in worker.slots)
        print(f"   {_confidence_mark(nc)} [{worker.work_type.value}] {before} -> {worker.name} "
              f"({confidence:.2f}, {kind})  {slots}")
    print("\n" + "="*80 + "\n")


def main():
    """Main CLI entry point"""
    args = [a for a in sys.argv[1:] if not a.startswith('--')]
    flags = {a for a in sys.argv[1:] if a.startswith('--')}
    if len(args) != 1:
        print("Usage: python sync_worklog.py <ocr.json> [--save] [--force]")
        sys.exit(1)

    import config
    from batch_engine.batch_orchestrator import BatchOrchestrator
    from correction.data_corrector import DataCorrector
    from correction.models import OcrSubmission
    from master_data.master_data_cache import MasterDataCache
    from master_data.master_data_service import MasterDataService
    from master_data.models import MasterDataError
    from reconcile.row_reconciler import RowReconciler
    from reconcile.interval_consolidator import InvalidTimeSlotError
    from reconcile.work_period import InvalidWorkDateError
    from sheets.row_store import SheetsRowStore
    from sheets.store_errors import StoreError

    path = Path(args[0])
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        print(f"❌ Could not read {path}: {str(e)}\n")
        sys.exit(1)

    try:
        config.validate_config()
        store = SheetsRowStore()
        service = MasterDataService(store, cache=MasterDataCache(cache_file=config.MASTER_DATA_CACHE_FILE or None))
        submission = DataCorrector(service).correct_submission(OcrSubmission.from_ocr_json(data))
    except MasterDataError as e:
        print(f"❌ Master data: {str(e)}")
        print(f"   {e.user_action}\n")
        sys.exit(1)
    except (StoreError, ValueError) as e:
        print(f"❌ {str(e)}\n")
        sys.exit(1)

    print_corrections(submission)

    if '--save' not in flags:
        return
    if submission.needs_confirmation() and '--force' not in flags:
        print("⚠️  Some corrections are flagged; review them and re-run with --force to save.\n")
        sys.exit(2)

    try:
        result = BatchOrchestrator(RowReconciler(store)).save_all_sync(submission.header, submission.workers)
    except (InvalidWorkDateError, InvalidTimeSlotError) as e:
        print(f"❌ {str(e)}\n")
        sys.exit(1)
    except StoreError as e:
        print(f"❌ Save failed: {str(e)}\n")
        sys.exit(1)

    print(f"💾 Saved {result.written_count} worker(s) for period {result.period_label}")
    for outcome in result.outcomes:
        if outcome.is_written:
            print(f"   ✅ {outcome.worker_name}: {outcome.sheet_name} row {outcome.row_index} ({outcome.status.value})")
    for name in result.failed_workers:
        print(f"   ❌ {name}: personal sheet not found")
    print()
    sys.exit(0 if result.is_complete else 3)


if __name__ == "__main__":
    main()
