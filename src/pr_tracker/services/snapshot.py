"""Snapshot serialization for export, import and sharing."""

import json
from dataclasses import dataclass
from datetime import date
from typing import Protocol, runtime_checkable

from ..models import AppSnapshot, Exercise, PRRecord, UserPreferences, now_iso
from .validation import parse_snapshot_json

SNAPSHOT_MIME_TYPE = "application/json"


@runtime_checkable
class ShareSheet(Protocol):
    """Platform share dialog that accepts a file."""

    async def share(self, path: str, mime_type: str) -> None:
        ...


def build_snapshot(
    exercises: list[Exercise],
    pr_records: list[PRRecord],
    preferences: UserPreferences,
) -> AppSnapshot:
    """Wrap the current state in a snapshot stamped with the current time."""
    return AppSnapshot(
        exercises=list(exercises),
        pr_records=list(pr_records),
        preferences=preferences,
        last_sync=now_iso(),
    )


def dump_snapshot(snapshot: AppSnapshot) -> bytes:
    """Serialize a snapshot to UTF-8 JSON."""
    return json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")


@dataclass
class ParsedSnapshot:
    """A validated snapshot plus the raw preferences it carried."""

    snapshot: AppSnapshot
    raw_preferences: dict | None


def load_snapshot(data: bytes | str) -> ParsedSnapshot:
    """Validate and deserialize snapshot JSON.

    Raises:
        SnapshotValidationError: If the payload fails a structural check
    """
    payload = parse_snapshot_json(data)
    return ParsedSnapshot(
        snapshot=AppSnapshot.from_dict(payload),
        raw_preferences=payload.get("preferences"),
    )


def backup_filename(day: date | None = None) -> str:
    """File name used for manual exports, e.g. pr-tracker-backup-2024-05-01.json."""
    day = day or date.today()
    return f"pr-tracker-backup-{day.isoformat()}.json"
