from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping

import yaml

from .errors import DataGapError, SnapshotValidationError
from .project_models import Department, Element, Priority, Snapshot, Task, TaskStatus

logger = logging.getLogger(__name__)

_STATUS_ALIASES: dict[str, TaskStatus] = {
    "todo": "todo",
    "to_do": "todo",
    "not_started": "todo",
    "pending": "todo",
    "open": "todo",
    "in_progress": "in_progress",
    "inprogress": "in_progress",
    "doing": "in_progress",
    "started": "in_progress",
    "done": "done",
    "completed": "done",
    "complete": "done",
}

_STATUS_PROGRESS: dict[TaskStatus, int] = {"todo": 0, "in_progress": 50, "done": 100}

_PRIORITIES: frozenset[str] = frozenset({"low", "medium", "high"})


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable input path strings like tasks[3].start_date."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


def load_snapshot(path: str) -> Snapshot:
    """Load a Snapshot from a YAML file at the given path."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_snapshot(raw)


def parse_snapshot(data: Any) -> Snapshot:
    """
    Build an immutable Snapshot from raw store records.

    - Statuses and priorities are normalized once here.
    - Malformed or missing task dates become None (the task stays listed but is
      never placed on the timeline).
    - Tasks are attached to their element; tasks without a known element are
      gathered into one synthesized "{department} Tasks" element per department.
    - Records that cannot be tied to a known department are dropped with a warning.
    """

    path = _Path()
    if not isinstance(data, Mapping):
        raise SnapshotValidationError(f"{path}: expected mapping at top level")

    departments = [
        _parse_department(raw, path.child(f"departments[{idx}]"))
        for idx, raw in enumerate(_require_list(data, "departments", path))
    ]
    dept_by_id = {dept.id: dept for dept in departments}

    raw_elements: list[Element] = []
    for idx, raw in enumerate(_require_list(data, "elements", path)):
        element = _parse_element(raw, path.child(f"elements[{idx}]"))
        if element.department_id not in dept_by_id:
            logger.warning(
                "Dropping element '%s': unknown department '%s'", element.id, element.department_id
            )
            continue
        raw_elements.append(element)
    element_by_id = {el.id: el for el in raw_elements}

    owned: dict[str, list[Task]] = {el.id: [] for el in raw_elements}
    ungrouped: dict[str, list[Task]] = {}
    for idx, raw in enumerate(_require_list(data, "tasks", path)):
        task = _parse_task(raw, path.child(f"tasks[{idx}]"))
        owner = element_by_id.get(task.element_id) if task.element_id else None
        if owner is not None:
            owned[owner.id].append(replace(task, department_id=owner.department_id))
        elif task.department_id in dept_by_id:
            pseudo_id = _ungrouped_id(task.department_id)
            ungrouped.setdefault(task.department_id, []).append(replace(task, element_id=pseudo_id))
        else:
            logger.warning("Dropping task '%s': no element or department to attach it to", task.id)

    elements = [_with_tasks(el, owned[el.id]) for el in raw_elements]
    for dept in departments:
        tasks = ungrouped.get(dept.id)
        if tasks:
            pseudo = Element(
                id=_ungrouped_id(dept.id),
                title=f"{dept.name} Tasks",
                department_id=dept.id,
                is_ungrouped=True,
            )
            elements.append(_with_tasks(pseudo, tasks))

    return Snapshot(departments=tuple(departments), elements=tuple(elements))


def lookup_status(value: Any) -> TaskStatus | None:
    """Resolve a status spelling (completed, to_do, In Progress...) without a fallback."""
    key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    return _STATUS_ALIASES.get(key)


def normalize_status(value: Any) -> TaskStatus:
    """Map the store's status spellings onto TaskStatus; unknown spellings become todo."""
    if value is None:
        return "todo"
    status = lookup_status(value)
    if status is None:
        logger.warning("Unknown task status %r; treating as 'todo'", value)
        return "todo"
    return status


def normalize_priority(value: Any) -> Priority | None:
    if value is None:
        return None
    key = str(value).strip().lower()
    return key if key in _PRIORITIES else None


def coerce_date(value: Any, item_id: str = "?") -> _dt.date | None:
    """
    Convert a raw date value to a calendar date.

    Returns None for missing values and raises DataGapError for malformed
    ones. Time-of-day (datetimes, ISO timestamps) is dropped.
    """

    if value is None or value == "":
        return None
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    if isinstance(value, str):
        try:
            return _dt.date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise DataGapError(item_id, f"malformed date {value!r}") from exc
    raise DataGapError(item_id, f"unsupported date value {value!r}")


def _parse_department(data: Any, path: _Path) -> Department:
    if not isinstance(data, Mapping):
        raise SnapshotValidationError(f"{path}: expected mapping for department")
    return Department(id=_require_id(data, path), name=_require_str(data, "name", path))


def _parse_element(data: Any, path: _Path) -> Element:
    if not isinstance(data, Mapping):
        raise SnapshotValidationError(f"{path}: expected mapping for element")
    element_id = _require_id(data, path)
    department_id = _optional_id(data.get("department_id", data.get("departmentId")))
    if department_id is None:
        raise SnapshotValidationError(f"{path}: missing required field 'department_id'")
    return Element(
        id=element_id,
        title=_require_str(data, "title", path),
        department_id=department_id,
        start_date=_lenient_date(data.get("start_date"), element_id, "start_date"),
        due_date=_lenient_date(data.get("due_date"), element_id, "due_date"),
        priority=normalize_priority(data.get("priority")),
    )


def _parse_task(data: Any, path: _Path) -> Task:
    if not isinstance(data, Mapping):
        raise SnapshotValidationError(f"{path}: expected mapping for task")
    task_id = _require_id(data, path)
    status = normalize_status(data.get("status"))
    department_id = data.get("department_id", data.get("assignee_department_id"))
    return Task(
        id=task_id,
        title=_require_str(data, "title", path),
        start_date=_lenient_date(data.get("start_date"), task_id, "start_date"),
        due_date=_lenient_date(data.get("due_date"), task_id, "due_date"),
        status=status,
        progress_percentage=_progress(data.get("progress_percentage"), status, task_id),
        element_id=_optional_id(data.get("element_id")),
        department_id=_optional_id(department_id),
        assignee=_optional_id(data.get("assignee", data.get("assignee_user_id"))),
        priority=normalize_priority(data.get("priority")),
    )


def _with_tasks(element: Element, tasks: list[Task]) -> Element:
    dated = [task for task in tasks if task.is_dated]
    for task in tasks:
        if not task.is_dated:
            logger.debug("Task '%s' has no usable date interval; excluded from timeline", task.id)
    derived_start = min((task.start_date for task in dated), default=None)
    derived_finish = max((task.due_date for task in dated), default=None)
    return replace(
        element,
        tasks=tuple(tasks),
        span_start=element.start_date or derived_start,
        span_finish=element.due_date or derived_finish,
    )


def _ungrouped_id(department_id: str) -> str:
    return f"ungrouped-{department_id}"


def _lenient_date(value: Any, item_id: str, field_name: str) -> _dt.date | None:
    try:
        return coerce_date(value, item_id)
    except DataGapError as exc:
        logger.debug("Ignoring %s of '%s': %s", field_name, item_id, exc.reason)
        return None


def _progress(value: Any, status: TaskStatus, item_id: str) -> int:
    if value is None:
        return _STATUS_PROGRESS[status]
    try:
        progress = int(round(float(value)))
    except (TypeError, ValueError):
        logger.debug("Ignoring progress_percentage %r of '%s'", value, item_id)
        return _STATUS_PROGRESS[status]
    return max(0, min(100, progress))


def _require_list(data: Mapping[str, Any], key: str, path: _Path) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotValidationError(f"{path.child(key)}: expected list")
    return value


def _require_id(data: Mapping[str, Any], path: _Path) -> str:
    value = _optional_id(data.get("id"))
    if value is None:
        raise SnapshotValidationError(f"{path}: missing required field 'id'")
    return value


def _optional_id(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _require_str(data: Mapping[str, Any], key: str, path: _Path) -> str:
    if key not in data:
        raise SnapshotValidationError(f"{path}: missing required field '{key}'")
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise SnapshotValidationError(f"{path.child(key)}: expected non-empty string")
    return value
