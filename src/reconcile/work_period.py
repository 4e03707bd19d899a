"""
Work Dates and Pay Periods
==========================

Pay periods run from the 21st of one month to the 20th of the next and are
named after the month they start in: 2025-03-20 belongs to the 2025年2月
period, 2025-03-21 to the 2025年3月 period.

Dates in personal sheets are keyed as M/D (no zero padding, no year).
"""
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

import config


class InvalidWorkDateError(ValueError):
    """The work date cannot be turned into a calendar date."""


# How far past today an M/D date may fall and still be read as this year
FUTURE_DATE_MARGIN = timedelta(days=31)


_MONTH_DAY = re.compile(r'^(\d{1,2})/(\d{1,2})$')
_YEAR_FIRST_SLASH = re.compile(r'^(\d{4})/(\d{1,2})/(\d{1,2})$')
_YEAR_FIRST_DASH = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
_YEAR_LAST = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')


def _split_date(text: str):
    """Return (year or None, month, day) for the supported formats, else None."""
    match = _MONTH_DAY.match(text)
    if match:
        return None, int(match.group(1)), int(match.group(2))
    match = _YEAR_FIRST_SLASH.match(text) or _YEAR_FIRST_DASH.match(text)
    if match:
        return int(match.group(1)), int(match.group(2)), int(match.group(3))
    match = _YEAR_LAST.match(text)
    if match:
        return int(match.group(3)), int(match.group(1)), int(match.group(2))
    return None


def normalize_work_date(value: str) -> str:
    """
    Normalize a date cell to M/D.

    Accepts M/D, YYYY/M/D, YYYY-M-D and M/D/YYYY (zero padding allowed).
    Anything else comes back unchanged, so the function is idempotent.
    """
    text = str(value).strip()
    parts = _split_date(text)
    if parts is None:
        return text
    _, month, day = parts
    return f"{month}/{day}"


def parse_work_date(value: str, today: Optional[date] = None) -> date:
    """
    Turn a free-format work date into a date.

    M/D has no year: the year of `today` is assumed, unless that puts the
    date more than FUTURE_DATE_MARGIN after `today`, in which case it is
    last year's date (a December log submitted in January).

    Raises:
        InvalidWorkDateError: unsupported format or impossible date
    """
    text = str(value or '').strip()
    parts = _split_date(text)
    if parts is None:
        raise InvalidWorkDateError(f"Unsupported work date format: '{value}'")
    year, month, day = parts
    inferred = year is None
    if inferred:
        today = today or date.today()
        year = today.year
    try:
        parsed = date(year, month, day)
        if inferred and parsed > today + FUTURE_DATE_MARGIN:
            parsed = date(year - 1, month, day)
        return parsed
    except ValueError as e:
        raise InvalidWorkDateError(f"Invalid work date '{value}': {e}") from e


@dataclass(frozen=True)
class PeriodKey:
    year: int
    month: int

    @property
    def label(self) -> str:
        return f"{self.year}年{self.month}月"


def period_for_date(work_date: date, start_day: Optional[int] = None) -> PeriodKey:
    """Pay period a work date belongs to."""
    start_day = config.PERIOD_START_DAY if start_day is None else start_day
    if work_date.day >= start_day:
        return PeriodKey(work_date.year, work_date.month)
    if work_date.month == 1:
        return PeriodKey(work_date.year - 1, 12)
    return PeriodKey(work_date.year, work_date.month - 1)


def personal_sheet_name(employee_name: str, period: PeriodKey) -> str:
    """Tab title of an employee's sheet for one pay period."""
    return config.PERSONAL_SHEET_NAME_TEMPLATE.format(
        employee=employee_name, year=period.year, month=period.month
    )
