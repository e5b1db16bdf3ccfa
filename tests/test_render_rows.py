import datetime as dt

from gantt_timeline.parse_snapshot import parse_snapshot
from gantt_timeline.render_rows import STATUS_COLORS, to_render_rows
from gantt_timeline.timeline import ViewState, build_layout


def _layout():
    snapshot = parse_snapshot(
        {
            "departments": [{"id": "d1", "name": "Engineering"}, {"id": "d2", "name": "Legal"}],
            "elements": [{"id": "e1", "title": "Backend", "department_id": "d1", "priority": "high"}],
            "tasks": [
                {"id": "t1", "title": "Schema", "element_id": "e1", "start_date": "2024-01-01", "due_date": "2024-01-05", "status": "done"},
                {"id": "t2", "title": "API", "element_id": "e1", "start_date": "2024-01-10", "due_date": "2024-01-20", "progress_percentage": 20},
                {"id": "t3", "title": "Ad hoc", "department_id": "d1", "start_date": "2024-01-02", "due_date": "2024-01-02"},
            ],
        }
    )
    return build_layout(snapshot, ViewState(view_mode="week"), dt.date(2024, 1, 3))


def test_rows_nest_departments_elements_and_tasks():
    rows = to_render_rows(_layout())

    assert [(row.node_type, row.node_id, row.indent) for row in rows] == [
        ("department", "d1", 0),
        ("element", "e1", 1),
        ("task", "t1", 2),
        ("task", "t2", 2),
        ("element", "ungrouped-d1", 1),
        ("task", "t3", 2),
        ("department", "d2", 0),
    ]
    assert [row.order for row in rows] == list(range(len(rows)))


def test_rows_carry_positions_status_and_progress():
    layout = _layout()
    rows = {row.node_id: row for row in to_render_rows(layout)}

    assert rows["t1"].position == layout.task_positions["t1"]
    assert rows["t1"].color == STATUS_COLORS["done"]
    assert rows["t1"].progress == 100
    assert rows["e1"].progress == 60
    assert rows["e1"].start_date == dt.date(2024, 1, 1)
    assert rows["e1"].finish_date == dt.date(2024, 1, 20)
    assert rows["ungrouped-d1"].name == "Engineering Tasks"


def test_department_without_elements_renders_as_empty_heading():
    rows = to_render_rows(_layout())

    legal = [row for row in rows if row.department_id == "d2"]
    assert len(legal) == 1
    assert legal[0].position is None
    assert legal[0].color == _layout().department_colors["d2"]
