from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from .project_models import DateRange, Element


def resolve_date_range(elements: Iterable[Element], padding_days: int = 7) -> DateRange | None:
    """
    Compute the padded date range spanning every dated task of the given elements.

    Returns None when no task carries both dates; callers render an empty state.
    """

    starts: list[date] = []
    finishes: list[date] = []
    for element in elements:
        for task in element.dated_tasks:
            starts.append(task.start_date)
            finishes.append(task.due_date)

    if not starts:
        return None

    padding = timedelta(days=padding_days)
    return DateRange(start=min(starts) - padding, end=max(finishes) + padding)


def each_day(start: date, end: date) -> list[date]:
    """Inclusive list of calendar days from start to end (empty when end < start)."""
    return [start + timedelta(days=offset) for offset in range(days_between(start, end) + 1)]


def days_between(earlier: date, later: date) -> int:
    return (later - earlier).days
