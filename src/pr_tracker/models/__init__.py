"""Data models for pr-tracker."""

from .exercise import (
    BarType,
    Exercise,
    ExerciseCategory,
    ExerciseDraft,
    MeasurementUnit,
    normalize_name,
)
from .preferences import (
    DefaultBarType,
    ThemeColor,
    ThemeMode,
    UserPreferences,
    WeightUnit,
)
from .record import PRRecord, sort_newest_first
from .snapshot import SNAPSHOT_VERSION, AppSnapshot, SnapshotStats, now_iso

__all__ = [
    "AppSnapshot",
    "BarType",
    "DefaultBarType",
    "Exercise",
    "ExerciseCategory",
    "ExerciseDraft",
    "MeasurementUnit",
    "normalize_name",
    "now_iso",
    "PRRecord",
    "SNAPSHOT_VERSION",
    "SnapshotStats",
    "sort_newest_first",
    "ThemeColor",
    "ThemeMode",
    "UserPreferences",
    "WeightUnit",
]
