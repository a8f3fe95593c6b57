"""Services for pr-tracker."""

from .engine import SyncEngine, new_id
from .picker import CancellationToken, FilePicker, pick_file
from .snapshot import ShareSheet, backup_filename, dump_snapshot, load_snapshot
from .validation import parse_snapshot_json, validate_snapshot

__all__ = [
    "backup_filename",
    "CancellationToken",
    "dump_snapshot",
    "FilePicker",
    "load_snapshot",
    "new_id",
    "parse_snapshot_json",
    "pick_file",
    "ShareSheet",
    "SyncEngine",
    "validate_snapshot",
]
