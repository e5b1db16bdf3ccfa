from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

from .errors import SettingsValidationError
from .project_models import ViewMode

VIEW_MODES: tuple[ViewMode, ...] = ("day", "week", "month")


def _default_window_days() -> dict[str, int]:
    return {"day": 14, "week": 30, "month": 60}


def _default_scroll_steps() -> dict[str, int]:
    return {"day": 7, "week": 14, "month": 30}


@dataclass(frozen=True)
class TimelineSettings:
    """Tunable constants of the layout engine."""

    padding_days: int = 7
    window_days: dict[str, int] = field(default_factory=_default_window_days)
    scroll_steps: dict[str, int] = field(default_factory=_default_scroll_steps)
    default_view_mode: ViewMode = "week"


DEFAULT_SETTINGS = TimelineSettings()


def load_settings(path: str) -> TimelineSettings:
    """
    Load settings from a YAML file.

    The file may either hold the settings mapping directly or wrap it in a
    top-level ``settings`` key (so a snapshot file can be reused).
    """

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    if isinstance(raw, dict) and "settings" in raw:
        raw = raw["settings"]
    return parse_settings(raw)


def parse_settings(data: Any) -> TimelineSettings:
    if data is None:
        return DEFAULT_SETTINGS
    if not isinstance(data, Mapping):
        raise SettingsValidationError("settings: expected mapping")

    extras = sorted(set(data.keys()) - {"padding_days", "window_days", "scroll_steps", "default_view_mode"})
    if extras:
        raise SettingsValidationError(f"settings: unexpected fields {extras}")

    padding_days = data.get("padding_days", DEFAULT_SETTINGS.padding_days)
    if not isinstance(padding_days, int) or isinstance(padding_days, bool) or padding_days < 0:
        raise SettingsValidationError("settings.padding_days: expected non-negative integer")

    window_days = _parse_per_mode(data.get("window_days"), DEFAULT_SETTINGS.window_days, "settings.window_days")
    scroll_steps = _parse_per_mode(data.get("scroll_steps"), DEFAULT_SETTINGS.scroll_steps, "settings.scroll_steps")

    default_view_mode = data.get("default_view_mode", DEFAULT_SETTINGS.default_view_mode)
    if default_view_mode not in VIEW_MODES:
        raise SettingsValidationError(f"settings.default_view_mode: expected one of {list(VIEW_MODES)}")

    return TimelineSettings(
        padding_days=padding_days,
        window_days=window_days,
        scroll_steps=scroll_steps,
        default_view_mode=default_view_mode,
    )


def _parse_per_mode(value: Any, defaults: dict[str, int], path: str) -> dict[str, int]:
    if value is None:
        return dict(defaults)
    if not isinstance(value, Mapping):
        raise SettingsValidationError(f"{path}: expected mapping of view mode to days")

    unknown = sorted(set(value.keys()) - set(VIEW_MODES))
    if unknown:
        raise SettingsValidationError(f"{path}: unknown view modes {unknown}")

    merged = dict(defaults)
    for mode, days in value.items():
        if not isinstance(days, int) or isinstance(days, bool) or days <= 0:
            raise SettingsValidationError(f"{path}.{mode}: expected positive integer")
        merged[mode] = days
    return merged
