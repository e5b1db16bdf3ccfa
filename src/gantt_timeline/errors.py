from __future__ import annotations


class TimelineError(Exception):
    """Base class for errors raised by the timeline engine."""


class SnapshotValidationError(TimelineError):
    """Raised when the snapshot structure is invalid (wrong shapes, missing ids)."""


class SettingsValidationError(TimelineError):
    """Raised when a settings block holds an invalid value."""


class EmptyRangeError(TimelineError):
    """Raised when a layout step is asked to work on an empty visible window."""


class DataGapError(TimelineError):
    """
    Raised when an item lacks the dates needed to place it on the timeline.

    Always caught inside the engine: the item is excluded and the gap logged.
    """

    def __init__(self, item_id: str, reason: str) -> None:
        super().__init__(f"{item_id}: {reason}")
        self.item_id = item_id
        self.reason = reason
