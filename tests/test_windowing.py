import datetime as dt

import pytest

from gantt_timeline.date_range import each_day, resolve_date_range
from gantt_timeline.project_models import Element, Task
from gantt_timeline.settings import TimelineSettings
from gantt_timeline.windowing import (
    can_scroll,
    clamp_offset,
    days_to_show,
    scroll,
    scroll_step,
    visible_days,
)


def _days(count, start=dt.date(2024, 1, 1)):
    return each_day(start, start + dt.timedelta(days=count - 1))


def _element(*intervals):
    tasks = tuple(
        Task(id=f"t{idx}", title=f"T{idx}", start_date=start, due_date=due)
        for idx, (start, due) in enumerate(intervals)
    )
    return Element(id="e", title="E", department_id="d", tasks=tasks)


def test_resolve_date_range_pads_both_ends_by_a_week():
    element = _element(
        (dt.date(2024, 1, 10), dt.date(2024, 1, 20)),
        (dt.date(2024, 1, 1), dt.date(2024, 1, 5)),
    )

    date_range = resolve_date_range([element])

    assert date_range.start == dt.date(2023, 12, 25)
    assert date_range.end == dt.date(2024, 1, 27)
    assert date_range.total_days == 34
    assert each_day(date_range.start, date_range.end)[0] == date_range.start
    assert len(each_day(date_range.start, date_range.end)) == 34


def test_resolve_date_range_ignores_undated_tasks_and_returns_none_when_empty():
    element = Element(
        id="e",
        title="E",
        department_id="d",
        tasks=(Task(id="a", title="A", start_date=dt.date(2024, 1, 1)),),
    )

    assert resolve_date_range([element]) is None
    assert resolve_date_range([]) is None


def test_window_lengths_and_steps_per_view_mode():
    assert [days_to_show(mode) for mode in ("day", "week", "month")] == [14, 30, 60]
    assert [scroll_step(mode) for mode in ("day", "week", "month")] == [7, 14, 30]


def test_unknown_view_mode_is_rejected():
    with pytest.raises(ValueError):
        days_to_show("year")


def test_visible_days_slices_from_offset():
    days = _days(40)

    window = visible_days(days, 5, "day")

    assert len(window) == 14
    assert window[0] == days[5]
    assert window == tuple(days[5:19])


def test_visible_window_never_exceeds_available_days():
    days = _days(10)

    window = visible_days(days, 3, "month")

    assert window == tuple(days)


def test_offset_is_clamped_into_bounds():
    assert clamp_offset(-4, 40, "day") == 0
    assert clamp_offset(100, 40, "day") == 26
    assert clamp_offset(12, 40, "day") == 12
    assert clamp_offset(7, 10, "week") == 0


def test_scroll_left_at_origin_is_a_no_op():
    assert scroll(0, "left", "week", 100) == 0
    assert scroll(scroll(0, "left", "week", 100), "left", "week", 100) == 0


def test_scroll_moves_by_view_step_and_clamps_at_the_end():
    assert scroll(0, "right", "day", 40) == 7
    assert scroll(7, "left", "day", 40) == 0
    assert scroll(20, "right", "day", 40) == 26
    assert scroll(26, "right", "day", 40) == 26
    assert scroll(0, "right", "week", 34) == 4


def test_scroll_rejects_unknown_direction():
    with pytest.raises(ValueError):
        scroll(0, "up", "day", 40)


def test_can_scroll_reports_button_availability():
    assert not can_scroll(0, "left", "day", 40)
    assert can_scroll(0, "right", "day", 40)
    assert not can_scroll(26, "right", "day", 40)
    assert not can_scroll(0, "right", "month", 40)


def test_custom_settings_drive_window_and_step():
    settings = TimelineSettings(window_days={"day": 5, "week": 30, "month": 60}, scroll_steps={"day": 2, "week": 14, "month": 30})
    days = _days(12)

    assert len(visible_days(days, 0, "day", settings)) == 5
    assert scroll(0, "right", "day", len(days), settings) == 2
    assert scroll(6, "right", "day", len(days), settings) == 7
