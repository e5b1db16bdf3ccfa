import datetime as dt

import pytest

from gantt_timeline.parse_snapshot import parse_snapshot
from gantt_timeline.render_rows import to_render_rows
from gantt_timeline.settings import TimelineSettings
from gantt_timeline.timeline import TimelineView, ViewState, build_layout

TODAY = dt.date(2024, 1, 3)


def _snapshot(extra_departments=()):
    return parse_snapshot(
        {
            "departments": [{"id": "d1", "name": "Engineering"}, *extra_departments],
            "elements": [{"id": "e1", "title": "Backend", "department_id": "d1"}],
            "tasks": [
                {
                    "id": "t1",
                    "title": "Schema",
                    "element_id": "e1",
                    "start_date": "2024-01-01",
                    "due_date": "2024-01-05",
                    "status": "done",
                },
                {
                    "id": "t2",
                    "title": "API",
                    "element_id": "e1",
                    "start_date": "2024-01-10",
                    "due_date": "2024-01-20",
                    "status": "todo",
                },
            ],
        }
    )


def test_week_view_scenario_resolves_padded_range_and_analytics():
    layout = build_layout(_snapshot(), ViewState(view_mode="week", scroll_offset=0), TODAY)

    assert layout.date_range.start == dt.date(2023, 12, 25)
    assert layout.date_range.end == dt.date(2024, 1, 27)
    assert len(layout.visible_days) == 30
    assert layout.visible_days[0] == dt.date(2023, 12, 25)
    (analytics,) = layout.department_analytics
    assert (analytics.total_tasks, analytics.completed_tasks, analytics.percentage) == (2, 1, 50)


def test_layout_positions_elements_and_tasks():
    layout = build_layout(_snapshot(), ViewState(view_mode="week"), TODAY)
    cell = 100 / 30

    assert layout.task_positions["t1"].left_percent == pytest.approx(7 * cell)
    assert layout.task_positions["t1"].width_percent == pytest.approx(5 * cell)
    assert layout.task_positions["t2"].left_percent == pytest.approx(16 * cell)
    assert layout.task_positions["t2"].width_percent == pytest.approx(11 * cell)
    assert layout.element_positions["e1"].width_percent == pytest.approx(20 * cell)


def test_element_and_task_sharing_an_id_keep_their_own_positions():
    snapshot = parse_snapshot(
        {
            "departments": [{"id": 1, "name": "Engineering"}],
            "elements": [
                {"id": 1, "title": "Backend", "department_id": 1, "start_date": "2024-01-01", "due_date": "2024-01-20"}
            ],
            "tasks": [
                {"id": 1, "title": "Schema", "element_id": 1, "start_date": "2024-01-10", "due_date": "2024-01-11"},
                {"id": 2, "title": "API", "element_id": 1, "start_date": "2024-01-01", "due_date": "2024-01-20"},
            ],
        }
    )
    layout = build_layout(snapshot, ViewState(view_mode="week"), TODAY)
    cell = 100 / 30

    assert layout.element_positions["1"].left_percent == pytest.approx(7 * cell)
    assert layout.element_positions["1"].width_percent == pytest.approx(20 * cell)
    assert layout.task_positions["1"].left_percent == pytest.approx(16 * cell)
    assert layout.task_positions["1"].width_percent == pytest.approx(2 * cell)

    rows = {(row.node_type, row.node_id): row for row in to_render_rows(layout)}
    assert rows[("element", "1")].position == layout.element_positions["1"]
    assert rows[("task", "1")].position == layout.task_positions["1"]


def test_layout_buckets_today_marker_and_density():
    layout = build_layout(_snapshot(), ViewState(view_mode="week"), TODAY)

    assert [b.label for b in layout.buckets] == ["W52", "W1", "W2", "W3", "W4"]
    assert tuple(day for b in layout.buckets for day in b.days) == layout.visible_days
    assert layout.today_percent == pytest.approx(9 * 100 / 30)
    assert layout.today_position.endswith("%")
    assert len(layout.daily_task_counts) == 30
    assert layout.daily_task_counts[7] == 1
    assert max(layout.daily_density) == 1.0


def test_today_outside_window_has_no_marker():
    layout = build_layout(_snapshot(), ViewState(view_mode="day"), dt.date(2024, 3, 1))

    assert layout.today_percent is None
    assert layout.today_position is None
    assert not any(b.is_today for b in layout.buckets)


def test_switching_day_to_month_keeps_and_reclamps_offset():
    view = TimelineView(_snapshot(), TODAY, state=ViewState(view_mode="day", scroll_offset=20))
    assert view.state.scroll_offset == 20
    assert len(view.layout().visible_days) == 14

    layout = view.set_view_mode("month")

    assert view.state.scroll_offset == 0
    assert layout.scroll_offset == 0
    assert len(layout.visible_days) == 34


def test_switching_view_mode_keeps_offset_when_still_in_bounds():
    view = TimelineView(_snapshot(), TODAY, state=ViewState(view_mode="day", scroll_offset=3))

    layout = view.set_view_mode("week")

    assert layout.scroll_offset == 3
    assert layout.visible_days[0] == dt.date(2023, 12, 28)


def test_scroll_is_clamped_at_both_ends():
    view = TimelineView(_snapshot(), TODAY)

    first = view.scroll("left")
    assert first.scroll_offset == 0
    assert not first.can_scroll_left
    assert first.can_scroll_right

    moved = view.scroll("right")
    assert moved.scroll_offset == 4
    assert moved.visible_days[-1] == dt.date(2024, 1, 27)
    assert moved.can_scroll_left
    assert not moved.can_scroll_right

    assert view.scroll("right").scroll_offset == 4


def test_day_view_scrolls_in_weekly_steps():
    view = TimelineView(_snapshot(), TODAY, state=ViewState(view_mode="day"))

    assert view.scroll("right").scroll_offset == 7
    assert view.scroll("right").scroll_offset == 14
    assert view.scroll("right").scroll_offset == 20
    assert view.scroll("left").scroll_offset == 13


def test_filters_that_match_nothing_yield_empty_layout():
    view = TimelineView(_snapshot(extra_departments=[{"id": "d2", "name": "Legal"}]), TODAY)

    layout = view.set_filters(status="in_progress")

    assert layout.is_empty
    assert layout.visible_days == ()
    assert layout.buckets == ()
    assert layout.element_positions == {}
    assert layout.task_positions == {}
    assert layout.today_position is None
    assert [a.department_id for a in layout.department_analytics] == ["d1", "d2"]
    assert all(a.total_tasks == 0 and a.percentage == 0 for a in layout.department_analytics)


def test_status_filter_narrows_range_and_clear_filters_restores_it():
    view = TimelineView(_snapshot(), TODAY)

    filtered = view.set_filters(status="completed")
    assert filtered.date_range.end == dt.date(2024, 1, 12)
    assert "t2" not in filtered.task_positions
    assert filtered.department_analytics[0].percentage == 100

    restored = view.clear_filters()
    assert restored.date_range.end == dt.date(2024, 1, 27)
    assert view.state.status_filter == "all"


def test_unknown_status_filter_leaves_view_state_untouched():
    view = TimelineView(_snapshot(), TODAY)

    with pytest.raises(ValueError):
        view.set_filters(status="bogus")

    assert view.state.status_filter == "all"
    assert not view.layout().is_empty


def test_department_without_elements_is_still_listed():
    layout = build_layout(_snapshot(extra_departments=[{"id": "d2", "name": "Legal"}]), ViewState(), TODAY)

    assert [d.id for d in layout.departments] == ["d1", "d2"]
    assert set(layout.department_colors) == {"d1", "d2"}
    assert layout.department_analytics[1].total_tasks == 0


def test_replace_snapshot_recomputes_and_reclamps():
    view = TimelineView(_snapshot(), TODAY, state=ViewState(view_mode="day", scroll_offset=20))
    smaller = parse_snapshot(
        {
            "departments": [{"id": "d1", "name": "Engineering"}],
            "elements": [],
            "tasks": [{"id": "x", "title": "X", "department_id": "d1", "start_date": "2024-01-01", "due_date": "2024-01-02"}],
        }
    )

    layout = view.replace_snapshot(smaller)

    assert layout.scroll_offset == 2
    assert layout.elements[0].id == "ungrouped-d1"


def test_custom_padding_setting_is_applied():
    settings = TimelineSettings(padding_days=0)

    layout = build_layout(_snapshot(), ViewState(view_mode="month"), TODAY, settings)

    assert layout.date_range.start == dt.date(2024, 1, 1)
    assert len(layout.visible_days) == 20


def test_build_layout_does_not_mutate_snapshot():
    snapshot = _snapshot()
    before = snapshot.elements

    build_layout(snapshot, ViewState(status_filter="done"), TODAY)

    assert snapshot.elements is before
    assert [task.id for task in snapshot.elements[0].tasks] == ["t1", "t2"]


def test_unknown_view_mode_is_rejected():
    with pytest.raises(ValueError):
        build_layout(_snapshot(), ViewState(view_mode="year"), TODAY)
    with pytest.raises(ValueError):
        TimelineView(_snapshot(), TODAY).set_view_mode("year")


def test_to_dict_is_plain_data():
    payload = build_layout(_snapshot(), ViewState(), TODAY).to_dict()

    assert payload["date_range"] == {"start": "2023-12-25", "end": "2024-01-27"}
    assert payload["visible_days"][0] == "2023-12-25"
    assert payload["buckets"][1]["is_today"] is True
    assert payload["task_positions"]["t1"]["left_percent"] == pytest.approx(7 * 100 / 30)
    assert payload["department_analytics"][0]["percentage"] == 50
    assert payload["empty"] is False
