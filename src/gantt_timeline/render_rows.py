from __future__ import annotations

from typing import List

from .project_models import Element, FlatRenderRow, Task, TaskStatus, TimelineLayout

STATUS_COLORS: dict[TaskStatus, str] = {
    "done": "#22c55e",
    "in_progress": "#3b82f6",
    "todo": "#94a3b8",
}

PRIORITY_COLORS: dict[str, str] = {
    "high": "#fecaca",
    "medium": "#fed7aa",
    "low": "#d1fae5",
}


def to_render_rows(layout: TimelineLayout) -> list[FlatRenderRow]:
    """
    Convert a layout into a flat list of render rows with indentation.

    Department headings are emitted for every department, including those
    with no visible element (they render as an empty row). Element rows follow
    their department heading, and task rows follow their element.
    """

    rows: List[FlatRenderRow] = []
    order = 0

    for dept in layout.departments:
        rows.append(
            FlatRenderRow(
                order=order,
                indent=0,
                node_type="department",
                node_id=dept.id,
                name=dept.name,
                department_id=dept.id,
                color=layout.department_colors.get(dept.id),
            )
        )
        order += 1
        for element in layout.elements:
            if element.department_id != dept.id:
                continue
            order = _append_element(element, layout, rows, order)

    return rows


def _append_element(element: Element, layout: TimelineLayout, rows: List[FlatRenderRow], order: int) -> int:
    """Append the element and its task rows; return updated order counter."""

    rows.append(
        FlatRenderRow(
            order=order,
            indent=1,
            node_type="element",
            node_id=element.id,
            name=element.title,
            department_id=element.department_id,
            position=layout.element_positions.get(element.id),
            start_date=element.span_start,
            finish_date=element.span_finish,
            progress=_element_progress(element.tasks),
            color=PRIORITY_COLORS.get(element.priority or "", layout.department_colors.get(element.department_id)),
        )
    )
    order += 1
    for task in element.tasks:
        rows.append(
            FlatRenderRow(
                order=order,
                indent=2,
                node_type="task",
                node_id=task.id,
                name=task.title,
                department_id=element.department_id,
                position=layout.task_positions.get(task.id),
                start_date=task.start_date,
                finish_date=task.due_date,
                status=task.status,
                progress=task.progress_percentage,
                color=STATUS_COLORS[task.status],
            )
        )
        order += 1
    return order


def _element_progress(tasks: tuple[Task, ...]) -> int:
    if not tasks:
        return 0
    return round(sum(task.progress_percentage for task in tasks) / len(tasks))
