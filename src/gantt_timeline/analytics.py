from __future__ import annotations

import math
from collections import Counter
from datetime import date
from typing import Iterable, Sequence

from .project_models import Department, DepartmentAnalytics, Element, OverallStatistics, Task

DEPARTMENT_PALETTE: tuple[str, ...] = (
    "#3B82F6",
    "#F59E0B",
    "#10B981",
    "#8B5CF6",
    "#EF4444",
    "#06B6D4",
    "#F97316",
    "#84CC16",
    "#EC4899",
    "#6366F1",
)


def completion_percentage(completed: int, total: int) -> int:
    """Rounded (half up) share of completed tasks; 0 when there are no tasks."""
    if total <= 0:
        return 0
    return math.floor(completed * 100 / total + 0.5)


def department_analytics(
    departments: Iterable[Department], elements: Iterable[Element]
) -> list[DepartmentAnalytics]:
    """
    Task counts per department over the (already filtered) elements.

    Every department is reported, in input order, even when it has no tasks,
    so legends and filter lists keep a row for it.
    """

    by_department: dict[str, Counter[str]] = {}
    for element in elements:
        counts = by_department.setdefault(element.department_id, Counter())
        for task in element.tasks:
            counts[task.status] += 1

    result: list[DepartmentAnalytics] = []
    for dept in departments:
        counts = by_department.get(dept.id, Counter())
        total = sum(counts.values())
        result.append(
            DepartmentAnalytics(
                department_id=dept.id,
                department_name=dept.name,
                total_tasks=total,
                completed_tasks=counts["done"],
                in_progress_tasks=counts["in_progress"],
                todo_tasks=counts["todo"],
                percentage=completion_percentage(counts["done"], total),
            )
        )
    return result


def overall_statistics(elements: Iterable[Element]) -> OverallStatistics:
    counts: Counter[str] = Counter(task.status for task in _tasks(elements))
    total = sum(counts.values())
    return OverallStatistics(
        total_tasks=total,
        completed_tasks=counts["done"],
        in_progress_tasks=counts["in_progress"],
        todo_tasks=counts["todo"],
        percentage=completion_percentage(counts["done"], total),
    )


def daily_task_counts(elements: Iterable[Element], visible: Sequence[date]) -> list[int]:
    """Number of tasks whose inclusive interval contains each visible day."""
    tasks = [task for task in _tasks(elements) if task.is_dated]
    return [sum(1 for task in tasks if task.covers(day)) for day in visible]


def density_ratios(counts: Sequence[int]) -> list[float]:
    """Scale daily counts to [0, 1] against the busiest day."""
    peak = max(counts, default=0)
    if peak == 0:
        return [0.0 for _ in counts]
    return [count / peak for count in counts]


def department_colors(departments: Iterable[Department]) -> dict[str, str]:
    """Assign palette colours cyclically in department order."""
    return {
        dept.id: DEPARTMENT_PALETTE[idx % len(DEPARTMENT_PALETTE)] for idx, dept in enumerate(departments)
    }


def _tasks(elements: Iterable[Element]) -> Iterable[Task]:
    for element in elements:
        yield from element.tasks
