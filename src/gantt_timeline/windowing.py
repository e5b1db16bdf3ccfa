from __future__ import annotations

from datetime import date
from typing import Sequence

from .project_models import ScrollDirection, ViewMode
from .settings import DEFAULT_SETTINGS, TimelineSettings


def days_to_show(view_mode: ViewMode, settings: TimelineSettings = DEFAULT_SETTINGS) -> int:
    """Window length for a view mode (14 / 30 / 60 days by default)."""
    try:
        return settings.window_days[view_mode]
    except KeyError:
        raise ValueError(f"unknown view mode {view_mode!r}") from None


def scroll_step(view_mode: ViewMode, settings: TimelineSettings = DEFAULT_SETTINGS) -> int:
    """Pan distance for a view mode (7 / 14 / 30 days by default)."""
    try:
        return settings.scroll_steps[view_mode]
    except KeyError:
        raise ValueError(f"unknown view mode {view_mode!r}") from None


def max_offset(total_days: int, view_mode: ViewMode, settings: TimelineSettings = DEFAULT_SETTINGS) -> int:
    return max(0, total_days - days_to_show(view_mode, settings))


def clamp_offset(
    offset: int, total_days: int, view_mode: ViewMode, settings: TimelineSettings = DEFAULT_SETTINGS
) -> int:
    """Clamp a scroll offset into [0, total_days - window length]."""
    return max(0, min(offset, max_offset(total_days, view_mode, settings)))


def visible_days(
    range_days: Sequence[date],
    offset: int,
    view_mode: ViewMode,
    settings: TimelineSettings = DEFAULT_SETTINGS,
) -> tuple[date, ...]:
    """
    Slice the full range into the visible window.

    The offset is clamped first, so the window never runs past either end and
    never exceeds the number of available days.
    """

    start = clamp_offset(offset, len(range_days), view_mode, settings)
    return tuple(range_days[start : start + days_to_show(view_mode, settings)])


def scroll(
    offset: int,
    direction: ScrollDirection,
    view_mode: ViewMode,
    total_days: int,
    settings: TimelineSettings = DEFAULT_SETTINGS,
) -> int:
    """Return the offset after panning one step; out-of-bounds moves are clamped, never raised."""
    step = scroll_step(view_mode, settings)
    if direction == "left":
        moved = offset - step
    elif direction == "right":
        moved = offset + step
    else:
        raise ValueError(f"unknown scroll direction {direction!r}")
    return clamp_offset(moved, total_days, view_mode, settings)


def can_scroll(
    offset: int,
    direction: ScrollDirection,
    view_mode: ViewMode,
    total_days: int,
    settings: TimelineSettings = DEFAULT_SETTINGS,
) -> bool:
    current = clamp_offset(offset, total_days, view_mode, settings)
    return scroll(current, direction, view_mode, total_days, settings) != current
