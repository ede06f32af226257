"""Fold the 3-hourly forecast into per-day summaries, with per-day drill-down.

Entries are grouped by the date prefix of their provider timestamp. The
timestamp is local time already, so no timezone arithmetic happens here.
Input is expected in ascending time order (as the provider returns it) and is
never re-sorted: first-seen order is chronological order.
"""
from __future__ import annotations

import datetime as dt
from typing import Dict, List, Sequence, Union

from weatherapp.models import DailySummary, ForecastEntry

MAX_DAILY_SUMMARIES = 6

DateLike = Union[str, dt.date]


def _date_key(date: DateLike) -> str:
    if isinstance(date, dt.date):
        return date.isoformat()[:10]
    return str(date)[:10]


def group_by_date(entries: Sequence[ForecastEntry]) -> Dict[str, List[ForecastEntry]]:
    """Partition entries by calendar date, keys in first-seen order."""
    groups: Dict[str, List[ForecastEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.date_key, []).append(entry)
    return groups


def _summarize(date: str, group: Sequence[ForecastEntry]) -> DailySummary:
    temperatures = [e.temperature_c for e in group]
    return DailySummary(
        date=date,
        min_temperature_c=min(temperatures) if temperatures else None,
        max_temperature_c=max(temperatures) if temperatures else None,
        representative_icon=group[0].icon_code if group else "",
    )


def summarize_by_day(
    entries: Sequence[ForecastEntry],
    *,
    max_days: int = MAX_DAILY_SUMMARIES,
) -> List[DailySummary]:
    """
    Summarize the first ``max_days`` distinct dates of ``entries``.

    Each summary carries the min/max temperature of that date's entries and
    the icon of its first entry. Dates past the cap are dropped silently; an
    empty input gives an empty list.
    """
    groups = group_by_date(entries)
    return [_summarize(date, group) for date, group in list(groups.items())[:max_days]]


def entries_for_date(entries: Sequence[ForecastEntry], date: DateLike) -> List[ForecastEntry]:
    """All entries whose calendar date is ``date``, in original order."""
    key = _date_key(date)
    return [e for e in entries if e.date_key == key]
