"""Personal record history entries."""

from dataclasses import dataclass
from datetime import datetime, timezone


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``.

    Naive timestamps are treated as UTC so they compare with aware ones.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class PRRecord:
    """One logged attempt for an exercise.

    Records are append-only: they are never edited after creation and are only
    removed when their exercise is deleted.
    """

    id: str
    exercise_id: str
    value: float  # total weight (bar + plates), reps or seconds
    date: str  # ISO-8601
    plates_weight: float | None = None  # plates only, without the bar
    bar_type: str | None = None
    notes: str | None = None

    @property
    def timestamp(self) -> datetime:
        return parse_timestamp(self.date)

    def to_dict(self) -> dict:
        """Convert to the snapshot representation."""
        data = {
            "id": self.id,
            "exerciseId": self.exercise_id,
            "value": self.value,
        }
        if self.plates_weight is not None:
            data["platesWeight"] = self.plates_weight
        if self.bar_type is not None:
            data["barType"] = self.bar_type
        data["date"] = self.date
        if self.notes:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PRRecord":
        """Create from the snapshot representation."""
        return cls(
            id=str(data["id"]),
            exercise_id=str(data["exerciseId"]),
            value=data["value"],
            date=data["date"],
            plates_weight=data.get("platesWeight"),
            bar_type=data.get("barType"),
            notes=data.get("notes"),
        )


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(record: PRRecord) -> datetime:
    try:
        return record.timestamp
    except (AttributeError, TypeError, ValueError):
        return _EPOCH


def sort_newest_first(records: list[PRRecord]) -> list[PRRecord]:
    """Order records by timestamp, most recent first.

    Records with an unparseable date sort last.
    """
    return sorted(records, key=_sort_key, reverse=True)


def latest_date(records: list[PRRecord]) -> str | None:
    """Return the date string of the most recent record, if any."""
    if not records:
        return None
    return max(records, key=_sort_key).date
