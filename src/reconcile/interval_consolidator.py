"""
Interval Consolidation
Collapses fragmented work slots into the single start/end pair the payroll
columns hold. Gaps between fragments count as unpaid break time and are
taken off the end time; the fragments themselves survive only in remarks.
"""
import re
from dataclasses import dataclass
from typing import List

from correction.models import TimeSlot


_TIME = re.compile(r'^(\d{1,2})[:：](\d{2})$')


class InvalidTimeSlotError(ValueError):
    """A slot time that has to be consolidated is not H:MM."""


@dataclass(frozen=True)
class ConsolidatedInterval:
    start: str
    end: str
    inter_gap_minutes: int = 0


def time_to_minutes(value: str) -> int:
    """'9:05' -> 545. Raises InvalidTimeSlotError for anything that is not H:MM."""
    match = _TIME.match(value.strip())
    if not match:
        raise InvalidTimeSlotError(f"Invalid time '{value}', expected H:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """545 -> '9:05'"""
    return f"{minutes // 60}:{minutes % 60:02d}"


def consolidate(slots: List[TimeSlot]) -> ConsolidatedInterval:
    """
    Merge work slots into one interval.

    0 or 1 slot passes through. With more, incomplete slots are dropped,
    the rest sorted by start; end = last end minus the sum of positive gaps.

    >>> consolidate([TimeSlot('9:00', '12:00'), TimeSlot('13:00', '17:00')])
    ConsolidatedInterval(start='9:00', end='16:00', inter_gap_minutes=60)
    """
    if not slots:
        return ConsolidatedInterval(start='', end='')
    if len(slots) == 1:
        return ConsolidatedInterval(start=slots[0].start, end=slots[0].end)

    timed = sorted(
        ((time_to_minutes(s.start), time_to_minutes(s.end), s) for s in slots if s.is_complete()),
        key=lambda item: item[0],
    )
    if not timed:
        return ConsolidatedInterval(start='', end='')

    total_gap = 0
    for (_, current_end, _), (next_start, _, _) in zip(timed, timed[1:]):
        gap = next_start - current_end
        if gap > 0:
            total_gap += gap

    first_slot = timed[0][2]
    last_end = timed[-1][1]
    return ConsolidatedInterval(
        start=first_slot.start,
        end=minutes_to_time(last_end - total_gap),
        inter_gap_minutes=total_gap,
    )


def format_slots(slots: List[TimeSlot]) -> str:
    """'9:00-12:00, 13:00-17:00' in the order the slots were written."""
    return ', '.join(f"{s.start}-{s.end}" for s in slots)


def validate_slots(slots: List[TimeSlot]):
    """
    Check the times consolidate() will parse, without consolidating.

    A single slot is copied to the sheet as written and is not checked.

    Raises:
        InvalidTimeSlotError: a complete slot in a multi-slot list is not H:MM
    """
    if len(slots) < 2:
        return
    for slot in slots:
        if slot.is_complete():
            time_to_minutes(slot.start)
            time_to_minutes(slot.end)
