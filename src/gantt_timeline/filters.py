from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .parse_snapshot import lookup_status
from .project_models import ALL, Element, Task, TaskStatus


def resolve_status_filter(status: str) -> TaskStatus | None:
    """Return the TaskStatus a filter value selects, or None for 'all'."""
    if status == ALL:
        return None
    wanted = lookup_status(status)
    if wanted is None:
        raise ValueError(f"unknown status filter {status!r}; expected 'all', 'todo', 'in_progress' or 'done'")
    return wanted


def filter_elements(elements: Iterable[Element], department: str = ALL, status: str = ALL) -> list[Element]:
    """
    Apply department and status filters to the element list for the timeline view.

    Returned elements are new values whose tasks are narrowed to dated tasks
    matching the status filter. Elements from other departments, or with no
    task left after narrowing, are dropped. Input order is preserved and the
    inputs are left untouched. An unknown status filter raises ValueError.
    """

    wanted_status = resolve_status_filter(status)
    result: list[Element] = []
    for element in elements:
        if department != ALL and element.department_id != department:
            continue
        tasks = tuple(task for task in element.tasks if _keep_task(task, wanted_status))
        if not tasks:
            continue
        result.append(replace(element, tasks=tasks))
    return result


def _keep_task(task: Task, wanted_status: str | None) -> bool:
    if not task.is_dated:
        return False
    return wanted_status is None or task.status == wanted_status
