from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date

from .analytics import (
    daily_task_counts,
    density_ratios,
    department_analytics,
    department_colors,
    overall_statistics,
)
from .buckets import group_days
from .date_range import each_day, resolve_date_range
from .filters import filter_elements
from .positioning import position_interval, today_position
from .project_models import ALL, PositionedInterval, ScrollDirection, Snapshot, TimelineLayout, ViewMode
from .settings import DEFAULT_SETTINGS, VIEW_MODES, TimelineSettings
from .windowing import can_scroll, clamp_offset, scroll, visible_days

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewState:
    """User-controlled inputs of a layout pass."""

    view_mode: ViewMode = "week"
    scroll_offset: int = 0
    department_filter: str = ALL
    status_filter: str = ALL


def build_layout(
    snapshot: Snapshot,
    state: ViewState,
    today: date,
    settings: TimelineSettings = DEFAULT_SETTINGS,
) -> TimelineLayout:
    """
    Compute the complete layout model for one view state.

    Pure function of its inputs: filters the snapshot, resolves the padded
    range, slices the visible window and derives buckets, bar positions, the
    today marker and analytics from it. When no filtered task is dated the
    result is an empty layout (no window, analytics still filled in).
    """

    _check_view_mode(state.view_mode)

    elements = filter_elements(snapshot.elements, state.department_filter, state.status_filter)
    common = dict(
        view_mode=state.view_mode,
        department_filter=state.department_filter,
        status_filter=state.status_filter,
        departments=snapshot.departments,
        department_colors=department_colors(snapshot.departments),
        elements=tuple(elements),
        department_analytics=tuple(department_analytics(snapshot.departments, elements)),
        overall=overall_statistics(elements),
    )

    date_range = resolve_date_range(elements, settings.padding_days)
    if date_range is None:
        logger.debug("No dated tasks match the filters; returning empty layout")
        return TimelineLayout(scroll_offset=0, **common)

    range_days = each_day(date_range.start, date_range.end)
    total_days = len(range_days)
    offset = clamp_offset(state.scroll_offset, total_days, state.view_mode, settings)
    window = visible_days(range_days, offset, state.view_mode, settings)

    element_positions: dict[str, PositionedInterval | None] = {}
    task_positions: dict[str, PositionedInterval | None] = {}
    for element in elements:
        element_positions[element.id] = position_interval(element.span_start, element.span_finish, window)
        for task in element.tasks:
            task_positions[task.id] = position_interval(task.start_date, task.due_date, window)

    counts = daily_task_counts(elements, window)
    return TimelineLayout(
        scroll_offset=offset,
        date_range=date_range,
        visible_days=window,
        buckets=tuple(group_days(window, state.view_mode, today)),
        element_positions=element_positions,
        task_positions=task_positions,
        daily_task_counts=tuple(counts),
        daily_density=tuple(density_ratios(counts)),
        today_percent=today_position(window, today),
        can_scroll_left=can_scroll(offset, "left", state.view_mode, total_days, settings),
        can_scroll_right=can_scroll(offset, "right", state.view_mode, total_days, settings),
        **common,
    )


class TimelineView:
    """
    Stateful control surface for a host UI.

    Holds the current snapshot, injected "today" and view state; every control
    call stores the new state (offset clamped) and returns a freshly computed
    layout.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        today: date,
        settings: TimelineSettings = DEFAULT_SETTINGS,
        state: ViewState | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._today = today
        self._settings = settings
        self._state = state or ViewState(view_mode=settings.default_view_mode)
        _check_view_mode(self._state.view_mode)
        self._state = self._clamped(self._state)

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def today(self) -> date:
        return self._today

    def layout(self) -> TimelineLayout:
        logger.debug("Recomputing layout for %s", self._state)
        return build_layout(self._snapshot, self._state, self._today, self._settings)

    def set_view_mode(self, view_mode: ViewMode) -> TimelineLayout:
        """Switch resolution; the offset is kept and re-clamped to the new window length."""
        _check_view_mode(view_mode)
        self._state = self._clamped(replace(self._state, view_mode=view_mode))
        return self.layout()

    def scroll(self, direction: ScrollDirection) -> TimelineLayout:
        total = self._total_days(self._state)
        offset = scroll(self._state.scroll_offset, direction, self._state.view_mode, total, self._settings)
        self._state = replace(self._state, scroll_offset=offset)
        return self.layout()

    def set_filters(self, department: str = ALL, status: str = ALL) -> TimelineLayout:
        self._state = self._clamped(replace(self._state, department_filter=department, status_filter=status))
        return self.layout()

    def clear_filters(self) -> TimelineLayout:
        return self.set_filters(ALL, ALL)

    def replace_snapshot(self, snapshot: Snapshot, today: date | None = None) -> TimelineLayout:
        """Swap in a freshly fetched snapshot (and optionally a new today)."""
        self._snapshot = snapshot
        if today is not None:
            self._today = today
        self._state = self._clamped(self._state)
        return self.layout()

    def _total_days(self, state: ViewState) -> int:
        elements = filter_elements(self._snapshot.elements, state.department_filter, state.status_filter)
        date_range = resolve_date_range(elements, self._settings.padding_days)
        return 0 if date_range is None else date_range.total_days

    def _clamped(self, state: ViewState) -> ViewState:
        offset = clamp_offset(state.scroll_offset, self._total_days(state), state.view_mode, self._settings)
        return replace(state, scroll_offset=offset)


def _check_view_mode(view_mode: str) -> None:
    if view_mode not in VIEW_MODES:
        raise ValueError(f"unknown view mode {view_mode!r}; expected one of {list(VIEW_MODES)}")
