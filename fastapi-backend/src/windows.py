# src/windows.py
"""Reporting window resolution: named range tokens and explicit month ranges."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from errors import InvalidWindow

NAMED_WINDOWS: Dict[str, int] = {"1m": 1, "3m": 3, "6m": 6, "12m": 12}
DEFAULT_WINDOW = "12m"
RANGE_SEPARATOR = ".."
DEFAULT_MAX_MONTHS = 24

_MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}(-\d{2})?$")

DateLike = Union[date, datetime, str]


def month_start(day: date) -> date:
    if isinstance(day, datetime):
        day = day.date()
    return day.replace(day=1)


@dataclass(frozen=True)
class ReportingPeriod:
    """An inclusive span of calendar months, identified by ``token``."""

    start: date
    end: date
    token: str

    @property
    def months(self) -> List[date]:
        months: List[date] = []
        cursor = self.start
        while cursor <= self.end:
            months.append(cursor)
            cursor += relativedelta(months=1)
        return months

    @property
    def month_count(self) -> int:
        delta = relativedelta(self.end, self.start)
        return delta.years * 12 + delta.months + 1


def _parse_month(value: DateLike, label: str) -> date:
    if isinstance(value, date):
        return month_start(value)
    text = (value or "").strip()
    if not _MONTH_PATTERN.match(text):
        raise InvalidWindow(f"{label} '{value}' is not a YYYY-MM month")
    try:
        return month_start(date_parser.isoparse(text).date())
    except ValueError as exc:
        raise InvalidWindow(f"{label} '{value}' is not a valid month: {exc}") from exc


def resolve_window(
    window: Optional[str],
    anchor: date,
    *,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> ReportingPeriod:
    """
    Resolve a window request into a :class:`ReportingPeriod` ending no later than
    the month of *anchor*.

    Accepts a named token (``1m``, ``3m``, ``6m``, ``12m``), a
    ``YYYY-MM..YYYY-MM`` range, or explicit *start*/*end* months. Raises
    ``InvalidWindow`` for anything malformed or empty.
    """
    anchor_month = month_start(anchor)

    if start is not None or end is not None:
        if start is None or end is None:
            raise InvalidWindow("an explicit window needs both start and end")
        first, last = _parse_month(start, "start"), _parse_month(end, "end")
    else:
        token = (window or DEFAULT_WINDOW).strip().lower()
        if token in NAMED_WINDOWS:
            last = anchor_month
            first = last - relativedelta(months=NAMED_WINDOWS[token] - 1)
            return ReportingPeriod(start=first, end=last, token=token)
        if RANGE_SEPARATOR not in token:
            raise InvalidWindow(
                f"unknown reporting window '{window}'; expected one of "
                f"{sorted(NAMED_WINDOWS, key=NAMED_WINDOWS.get)} or YYYY-MM..YYYY-MM"
            )
        raw_start, _, raw_end = token.partition(RANGE_SEPARATOR)
        first, last = _parse_month(raw_start, "start"), _parse_month(raw_end, "end")

    if first > last:
        raise InvalidWindow(f"window start {first:%Y-%m} is after end {last:%Y-%m}")
    if last > anchor_month:
        raise InvalidWindow(f"window end {last:%Y-%m} is in the future")
    period = ReportingPeriod(start=first, end=last, token=f"{first:%Y-%m}{RANGE_SEPARATOR}{last:%Y-%m}")
    if period.month_count > max_months:
        raise InvalidWindow(f"window spans {period.month_count} months; the maximum is {max_months}")
    return period
