"""
Batch Engine Data Models

Pure definitions -- no store access.
"""
from dataclasses import dataclass, field
from typing import List

from reconcile.row_reconciler import ReconcileOutcome, ReconcileStatus


@dataclass
class BatchResult:
    """
    Result of saving one submission.

    A batch with NO_SHEET workers still succeeds; their names are listed
    in failed_workers so the caller can fix names or provision sheets.
    """
    failed_workers: List[str] = field(default_factory=list)
    outcomes: List[ReconcileOutcome] = field(default_factory=list)
    period_label: str = ''

    @property
    def written_count(self) -> int:
        return sum(1 for o in self.outcomes if o.is_written)

    @property
    def is_complete(self) -> bool:
        return not self.failed_workers

    def outcome_for(self, worker_name: str):
        for outcome in self.outcomes:
            if outcome.worker_name == worker_name:
                return outcome
        return None

    def to_dict(self):
        return {
            'failed_workers': list(self.failed_workers),
            'period': self.period_label,
            'written_count': self.written_count,
            'outcomes': [o.to_dict() for o in self.outcomes],
        }


__all__ = ['BatchResult', 'ReconcileOutcome', 'ReconcileStatus']
