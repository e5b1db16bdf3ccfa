from __future__ import annotations

from datetime import date
from typing import Sequence

from .date_range import days_between
from .errors import EmptyRangeError
from .project_models import PositionedInterval


def position_interval(
    start_date: date | None, due_date: date | None, visible: Sequence[date]
) -> PositionedInterval | None:
    """
    Map an inclusive [start_date, due_date] interval onto the visible window.

    - Returns None when the interval misses the window or lacks usable dates.
    - Clips the interval to the window edges before measuring it.
    - left = index of first covered day * cell width; width = covered days * cell width.
    """

    if not visible:
        raise EmptyRangeError("cannot position an interval on an empty window")
    if start_date is None or due_date is None or start_date > due_date:
        return None

    first, last = visible[0], visible[-1]
    if due_date < first or start_date > last:
        return None

    effective_start = max(start_date, first)
    effective_end = min(due_date, last)
    cell_width = 100 / len(visible)
    start_index = days_between(first, effective_start)
    duration = days_between(effective_start, effective_end) + 1

    left = start_index * cell_width
    # float guard: the clip bounds index + duration by len(visible)
    width = min(duration * cell_width, 100 - left)
    return PositionedInterval(left_percent=left, width_percent=width)


def today_position(visible: Sequence[date], today: date) -> float | None:
    """Left offset (percent) of today's column, or None when today is not visible."""
    if not visible:
        raise EmptyRangeError("cannot place today on an empty window")
    if today < visible[0] or today > visible[-1]:
        return None
    return days_between(visible[0], today) * (100 / len(visible))
