from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal


ViewMode = Literal["day", "week", "month"]
"""Timeline resolution: one column per day, grouped under day, week or month headers."""

TaskStatus = Literal["todo", "in_progress", "done"]
"""Closed set of task states; raw store spellings are normalized at ingestion."""

Priority = Literal["low", "medium", "high"]

ScrollDirection = Literal["left", "right"]

NodeKind = Literal["department", "element", "task"]
"""Allowed render row types: department heading, element (work package) bar, task bar."""

ALL = "all"
"""Filter value that matches every department or status."""


@dataclass(frozen=True)
class Department:
    """Top-level grouping that owns elements."""

    id: str
    name: str


@dataclass(frozen=True)
class Task:
    """Leaf work item; only tasks with both dates are placed on the timeline."""

    id: str
    title: str
    start_date: date | None = None
    due_date: date | None = None
    status: TaskStatus = "todo"
    progress_percentage: int = 0
    element_id: str | None = None
    department_id: str | None = None
    assignee: str | None = None
    priority: Priority | None = None

    @property
    def is_dated(self) -> bool:
        """True when the task carries a usable inclusive [start_date, due_date] interval."""
        if self.start_date is None or self.due_date is None:
            return False
        return self.start_date <= self.due_date

    def covers(self, day: date) -> bool:
        """Inclusive containment test; undated tasks cover nothing."""
        if not self.is_dated:
            return False
        return self.start_date <= day <= self.due_date


@dataclass(frozen=True)
class Element:
    """
    Work package owning a set of tasks.

    span_start/span_finish hold the element's own dates when present, otherwise
    the dates derived from its dated tasks. They are resolved once when the
    snapshot is built and never recomputed by later filtering.
    """

    id: str
    title: str
    department_id: str
    start_date: date | None = None
    due_date: date | None = None
    priority: Priority | None = None
    tasks: tuple[Task, ...] = ()
    span_start: date | None = None
    span_finish: date | None = None
    is_ungrouped: bool = False

    @property
    def dated_tasks(self) -> tuple[Task, ...]:
        return tuple(task for task in self.tasks if task.is_dated)


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of the store contents for one computation pass."""

    departments: tuple[Department, ...] = ()
    elements: tuple[Element, ...] = ()


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class PositionedInterval:
    """Horizontal placement of a bar as percentages of the visible window width."""

    left_percent: float
    width_percent: float

    def as_style(self) -> dict[str, str]:
        """CSS-like left/width pair, e.g. {'left': '10.0%', 'width': '20.0%'}."""
        return {"left": f"{self.left_percent}%", "width": f"{self.width_percent}%"}


@dataclass(frozen=True)
class DayBucket:
    """Header cell spanning one or more visible days."""

    key: str
    label: str
    sublabel: str
    days: tuple[date, ...]
    is_today: bool = False


@dataclass(frozen=True)
class DepartmentAnalytics:
    department_id: str
    department_name: str
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    percentage: int


@dataclass(frozen=True)
class OverallStatistics:
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    percentage: int


@dataclass(frozen=True)
class FlatRenderRow:
    """
    Flattened view of a layout used by renderers.

    Only the fields relevant to drawing are kept: positional order,
    indentation level, node kind, department ownership, bar placement and
    the status/progress/colour needed to paint it.
    """

    order: int
    indent: int
    node_type: NodeKind
    node_id: str
    name: str
    department_id: str
    position: PositionedInterval | None = None
    start_date: date | None = None
    finish_date: date | None = None
    status: TaskStatus | None = None
    progress: int | None = None
    color: str | None = None


@dataclass(frozen=True)
class TimelineLayout:
    """Everything a renderer needs to draw one state of the timeline."""

    view_mode: ViewMode
    scroll_offset: int
    department_filter: str
    status_filter: str
    departments: tuple[Department, ...]
    department_colors: dict[str, str]
    elements: tuple[Element, ...]
    department_analytics: tuple[DepartmentAnalytics, ...]
    overall: OverallStatistics
    date_range: DateRange | None = None
    visible_days: tuple[date, ...] = ()
    buckets: tuple[DayBucket, ...] = ()
    element_positions: dict[str, PositionedInterval | None] = field(default_factory=dict)
    task_positions: dict[str, PositionedInterval | None] = field(default_factory=dict)
    daily_task_counts: tuple[int, ...] = ()
    daily_density: tuple[float, ...] = ()
    today_percent: float | None = None
    can_scroll_left: bool = False
    can_scroll_right: bool = False

    @property
    def is_empty(self) -> bool:
        """True when no filtered task has both dates; renderers show a placeholder."""
        return self.date_range is None

    @property
    def today_position(self) -> str | None:
        if self.today_percent is None:
            return None
        return f"{self.today_percent}%"

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form (ISO dates, nested dicts) suitable for YAML or JSON output."""

        def position(value: PositionedInterval | None) -> dict[str, float] | None:
            if value is None:
                return None
            return {"left_percent": value.left_percent, "width_percent": value.width_percent}

        return {
            "view_mode": self.view_mode,
            "scroll_offset": self.scroll_offset,
            "filters": {"department": self.department_filter, "status": self.status_filter},
            "empty": self.is_empty,
            "date_range": (
                None
                if self.date_range is None
                else {"start": self.date_range.start.isoformat(), "end": self.date_range.end.isoformat()}
            ),
            "visible_days": [day.isoformat() for day in self.visible_days],
            "buckets": [
                {
                    "key": bucket.key,
                    "label": bucket.label,
                    "sublabel": bucket.sublabel,
                    "days": [day.isoformat() for day in bucket.days],
                    "is_today": bucket.is_today,
                }
                for bucket in self.buckets
            ],
            "element_positions": {item_id: position(value) for item_id, value in self.element_positions.items()},
            "task_positions": {item_id: position(value) for item_id, value in self.task_positions.items()},
            "today_position": self.today_position,
            "can_scroll_left": self.can_scroll_left,
            "can_scroll_right": self.can_scroll_right,
            "daily_task_counts": list(self.daily_task_counts),
            "departments": [
                {"id": dept.id, "name": dept.name, "color": self.department_colors.get(dept.id)}
                for dept in self.departments
            ],
            "department_analytics": [
                {
                    "department_id": item.department_id,
                    "department_name": item.department_name,
                    "total_tasks": item.total_tasks,
                    "completed_tasks": item.completed_tasks,
                    "in_progress_tasks": item.in_progress_tasks,
                    "todo_tasks": item.todo_tasks,
                    "percentage": item.percentage,
                }
                for item in self.department_analytics
            ],
            "overall": {
                "total_tasks": self.overall.total_tasks,
                "completed_tasks": self.overall.completed_tasks,
                "in_progress_tasks": self.overall.in_progress_tasks,
                "todo_tasks": self.overall.todo_tasks,
                "percentage": self.overall.percentage,
            },
        }
