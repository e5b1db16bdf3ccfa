from __future__ import annotations

from datetime import date
from typing import Callable, Hashable, Sequence

from .errors import EmptyRangeError
from .project_models import DayBucket, ViewMode


def group_days(visible: Sequence[date], view_mode: ViewMode, today: date) -> list[DayBucket]:
    """
    Group the visible days into header buckets.

    - day: one bucket per day.
    - week: consecutive days of the same Monday-anchored ISO week; the sublabel
      spans the visible part of that week only.
    - month: consecutive days of the same calendar month.

    Partial weeks or months at either end of the window still form a bucket,
    so the buckets always cover every visible day exactly once, in order.
    """

    if not visible:
        raise EmptyRangeError("cannot group an empty window")

    if view_mode == "day":
        return [_day_bucket(day, today) for day in visible]
    if view_mode == "week":
        return [_week_bucket(run, today) for run in _runs(visible, _iso_week)]
    if view_mode == "month":
        return [_month_bucket(run, today) for run in _runs(visible, _month_key)]
    raise ValueError(f"unknown view mode {view_mode!r}")


def _runs(days: Sequence[date], key: Callable[[date], Hashable]) -> list[tuple[date, ...]]:
    runs: list[tuple[date, ...]] = []
    current: list[date] = []
    current_key: Hashable = None
    for day in days:
        day_key = key(day)
        if current and day_key != current_key:
            runs.append(tuple(current))
            current = []
        current.append(day)
        current_key = day_key
    if current:
        runs.append(tuple(current))
    return runs


def _iso_week(day: date) -> tuple[int, int]:
    iso = day.isocalendar()
    return iso[0], iso[1]


def _month_key(day: date) -> tuple[int, int]:
    return day.year, day.month


def _short_date(day: date) -> str:
    return f"{day:%b} {day.day}"


def _day_bucket(day: date, today: date) -> DayBucket:
    return DayBucket(
        key=day.isoformat(),
        label=str(day.day),
        sublabel=f"{day:%a}",
        days=(day,),
        is_today=day == today,
    )


def _week_bucket(days: tuple[date, ...], today: date) -> DayBucket:
    year, week = _iso_week(days[0])
    return DayBucket(
        key=f"{year}-W{week:02d}",
        label=f"W{week}",
        sublabel=f"{_short_date(days[0])} - {_short_date(days[-1])}",
        days=days,
        is_today=today in days,
    )


def _month_bucket(days: tuple[date, ...], today: date) -> DayBucket:
    first = days[0]
    return DayBucket(
        key=f"{first.year}-{first.month:02d}",
        label=f"{first:%b}",
        sublabel=str(first.year),
        days=days,
        is_today=today in days,
    )
