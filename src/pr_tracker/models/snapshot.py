"""Snapshot envelope used for export, import and the sync file."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .exercise import Exercise
from .preferences import UserPreferences
from .record import PRRecord, latest_date

SNAPSHOT_VERSION = "1.0.0"


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class SnapshotStats:
    """Derived statistics stored alongside the data."""

    total_prs: int = 0
    last_pr_date: str | None = None

    @classmethod
    def compute(cls, records: list[PRRecord]) -> "SnapshotStats":
        return cls(total_prs=len(records), last_pr_date=latest_date(records))

    def to_dict(self) -> dict:
        data = {"totalPRs": self.total_prs}
        if self.last_pr_date:
            data["lastPRDate"] = self.last_pr_date
        return data


@dataclass
class AppSnapshot:
    """Full application state in its portable form."""

    exercises: list[Exercise] = field(default_factory=list)
    pr_records: list[PRRecord] = field(default_factory=list)
    preferences: UserPreferences = field(default_factory=UserPreferences)
    version: str = SNAPSHOT_VERSION
    last_sync: str = field(default_factory=now_iso)

    @property
    def stats(self) -> SnapshotStats:
        """Stats are always recomputed from the records they describe."""
        return SnapshotStats.compute(self.pr_records)

    def to_dict(self) -> dict:
        """Convert to the snapshot JSON structure."""
        return {
            "version": self.version,
            "lastSync": self.last_sync,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "prRecords": [pr.to_dict() for pr in self.pr_records],
            "preferences": self.preferences.to_dict(),
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSnapshot":
        """Create from a validated snapshot structure.

        Missing lists are treated as empty; the stats block is ignored since it
        is derived.
        """
        return cls(
            version=data.get("version") or SNAPSHOT_VERSION,
            last_sync=data.get("lastSync") or now_iso(),
            exercises=[Exercise.from_dict(ex) for ex in data.get("exercises") or []],
            pr_records=[PRRecord.from_dict(pr) for pr in data.get("prRecords") or []],
            preferences=UserPreferences.from_dict(data.get("preferences")),
        )
