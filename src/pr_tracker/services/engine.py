"""Sync engine: the single owner of application state.

The engine keeps the canonical in-memory copies of exercises, PR records and
preferences, and persists every mutation through the backend that is
authoritative at the time of the call:

- no sync file configured: the internal key-value store
- sync file configured: the external JSON file

Preferences are always saved to the internal store too, because they hold the
sync file path and must be found on startup before the external file is known.

Each mutation updates memory first and then persists. A failed write is
propagated to the caller but the in-memory change is kept; memory and storage
are best-effort consistent, not transactional. Callers are expected to await
mutations one at a time.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from ..errors import (
    ExerciseValidationError,
    RecordValidationError,
    SnapshotValidationError,
    StorageReadError,
    StorageWriteError,
)
from ..models import (
    AppSnapshot,
    Exercise,
    ExerciseDraft,
    PRRecord,
    UserPreferences,
    normalize_name,
    now_iso,
    sort_newest_first,
)
from ..models.preferences import NON_IMPORTABLE_FIELDS
from ..storage import (
    Bucket,
    ExternalFileBackend,
    FileSystem,
    InternalBackend,
    KeyValueStore,
    StorageBackend,
)
from ..storage.files import is_within, to_path
from .picker import CancellationToken, FilePicker, pick_file
from .snapshot import (
    SNAPSHOT_MIME_TYPE,
    ShareSheet,
    backup_filename,
    build_snapshot,
    dump_snapshot,
    load_snapshot,
)

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Generate a collision-resistant identifier."""
    return uuid4().hex


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class SyncEngine:
    """Owns exercises, PR records and preferences and keeps them persisted.

    Example:
        engine = SyncEngine(SqliteKeyValueStore(db_path), LocalFileSystem(), doc_dir)
        await engine.load()
        bench = await engine.add_exercise({"name": "Bench Press", "category": "barbell"})
        await engine.add_pr_record({"exerciseId": bench.id, "value": 225})
        await engine.close()
    """

    def __init__(
        self,
        store: KeyValueStore,
        files: FileSystem,
        document_dir: Path,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], str] = now_iso,
    ):
        self.files = files
        self.document_dir = Path(document_dir)
        self._internal = InternalBackend(store)
        self._external: ExternalFileBackend | None = None
        self._new_id = id_factory
        self._now = clock

        self._exercises: list[Exercise] = []
        self._pr_records: list[PRRecord] = []
        self._preferences = UserPreferences()
        self._loaded = False

    async def __aenter__(self) -> "SyncEngine":
        await self.load()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def exercises(self) -> list[Exercise]:
        return list(self._exercises)

    @property
    def pr_records(self) -> list[PRRecord]:
        return list(self._pr_records)

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    @property
    def total_prs(self) -> int:
        return len(self._pr_records)

    @property
    def sync_enabled(self) -> bool:
        return self._preferences.sync_enabled

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get_exercise(self, exercise_id: str) -> Exercise | None:
        """Get an exercise by ID."""
        for exercise in self._exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    def find_exercise(self, name: str) -> Exercise | None:
        """Find an exercise by name, ignoring case and surrounding spaces."""
        wanted = normalize_name(name)
        for exercise in self._exercises:
            if normalize_name(exercise.name) == wanted:
                return exercise
        return None

    def get_exercise_history(self, exercise_id: str) -> list[PRRecord]:
        """All records for an exercise, newest first. Does not touch storage."""
        return sort_newest_first(
            [pr for pr in self._pr_records if pr.exercise_id == exercise_id]
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load state from the authoritative backend.

        Preferences are read from internal storage first to learn whether a
        sync file is configured. If the sync file cannot be read, the internal
        copies are used instead; startup never fails because of it.
        """
        stored_prefs = await self._read_internal(Bucket.PREFERENCES)
        self._preferences = stored_prefs or UserPreferences()

        if self._preferences.sync_file_path:
            path = self._preferences.sync_file_path
            try:
                state = await self._external_for(path).read_all()
            except StorageReadError as e:
                logger.warning("Sync file unavailable, using local data: %s", e)
            else:
                logger.info("Loading from sync file %s", path)
                self._exercises = state.exercises or []
                self._pr_records = state.pr_records or []
                prefs = state.preferences or UserPreferences()
                # The sync path in memory always names the file we loaded from
                self._preferences = replace(prefs, sync_file_path=path)
                try:
                    await self._internal.write_bucket(Bucket.PREFERENCES, self._preferences)
                except StorageWriteError as e:
                    logger.warning("Could not save preferences locally: %s", e)
                self._loaded = True
                return

        logger.info("Loading from internal storage")
        # Buckets are read one by one so a corrupted one does not drop the rest
        self._exercises = await self._read_internal(Bucket.EXERCISES) or []
        self._pr_records = await self._read_internal(Bucket.PR_RECORDS) or []
        self._loaded = True

    async def close(self) -> None:
        """Release state. The engine can be loaded again afterwards."""
        self._exercises = []
        self._pr_records = []
        self._preferences = UserPreferences()
        self._external = None
        self._loaded = False

    async def _read_internal(self, bucket: Bucket) -> Any:
        try:
            return await self._internal.read_bucket(bucket)
        except StorageReadError as e:
            logger.warning("Stored %s unreadable, using defaults: %s", bucket.value, e)
            return None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _external_for(self, path: str) -> ExternalFileBackend:
        if self._external is None or self._external.path != path:
            self._external = ExternalFileBackend(self.files, path)
        return self._external

    def _active_backend(self) -> StorageBackend:
        """The backend that is authoritative for this call."""
        if self._preferences.sync_file_path:
            return self._external_for(self._preferences.sync_file_path)
        return self._internal

    def _full_state(self) -> dict[Bucket, Any]:
        return {
            Bucket.EXERCISES: list(self._exercises),
            Bucket.PR_RECORDS: list(self._pr_records),
            Bucket.PREFERENCES: self._preferences,
        }

    async def _persist(self, partial: dict[Bucket, Any], backend: StorageBackend | None = None) -> None:
        """Write the given buckets in one operation on the authoritative backend."""
        backend = backend or self._active_backend()
        if isinstance(backend, ExternalFileBackend) and not await backend.exists():
            # A vanished sync file is recreated from everything in memory
            logger.info("Sync file %s is missing, writing the full state", backend.path)
            partial = self._full_state()
        if Bucket.PREFERENCES in partial and backend is not self._internal:
            await self._internal.write_bucket(Bucket.PREFERENCES, partial[Bucket.PREFERENCES])
        await backend.write_all(partial)

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def _check_name(self, name, exclude_id: str | None = None) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ExerciseValidationError("Exercise name is required")
        wanted = normalize_name(name)
        for exercise in self._exercises:
            if exercise.id != exclude_id and normalize_name(exercise.name) == wanted:
                raise ExerciseValidationError(
                    f"An exercise named '{exercise.name}' already exists"
                )
        return name.strip()

    async def add_exercise(self, data: ExerciseDraft | dict) -> Exercise:
        """Create an exercise with a fresh ID.

        Raises:
            ExerciseValidationError: If the name is empty or already used
        """
        if isinstance(data, dict):
            try:
                data = ExerciseDraft.from_dict(data)
            except ValueError as e:
                raise ExerciseValidationError(f"Invalid exercise: {e}") from e
        self._check_name(data.name)

        try:
            exercise = data.build(self._new_id())
        except ValueError as e:
            raise ExerciseValidationError(f"Invalid exercise: {e}") from e
        self._exercises = [*self._exercises, exercise]
        logger.info("Added exercise %s (%s)", exercise.name, exercise.id)
        await self._persist({Bucket.EXERCISES: self._exercises})
        return exercise

    async def update_exercise(self, exercise_id: str, changes: dict) -> Exercise | None:
        """Merge changes into an exercise.

        Unknown IDs are ignored. Returns the updated exercise, or None.

        Raises:
            ExerciseValidationError: If the changes are invalid or the new
                name is already used
        """
        current = self.get_exercise(exercise_id)
        if current is None:
            logger.debug("update_exercise: no exercise with id %s", exercise_id)
            return None

        if "name" in changes:
            changes = {**changes, "name": self._check_name(changes["name"], exclude_id=exercise_id)}
        try:
            updated = current.merge(changes)
        except (KeyError, ValueError) as e:
            raise ExerciseValidationError(f"Invalid exercise update: {e}") from e

        self._exercises = [updated if ex.id == exercise_id else ex for ex in self._exercises]
        await self._persist({Bucket.EXERCISES: self._exercises})
        return updated

    async def delete_exercise(self, exercise_id: str) -> None:
        """Delete an exercise and every PR record that belongs to it."""
        self._exercises = [ex for ex in self._exercises if ex.id != exercise_id]
        removed = sum(1 for pr in self._pr_records if pr.exercise_id == exercise_id)
        self._pr_records = [pr for pr in self._pr_records if pr.exercise_id != exercise_id]
        logger.info("Deleted exercise %s and %d PR records", exercise_id, removed)
        await self._persist(
            {Bucket.EXERCISES: self._exercises, Bucket.PR_RECORDS: self._pr_records}
        )

    # ------------------------------------------------------------------
    # PR records
    # ------------------------------------------------------------------

    async def add_pr_record(self, data: dict) -> PRRecord:
        """Append a PR record and raise the exercise's current PR if beaten.

        The record append and the current PR update are persisted in the same
        write, so the two buckets never diverge in storage.

        Raises:
            RecordValidationError: If the value or plate weight is not a
                number, or the exercise does not exist
        """
        exercise_id = data.get("exerciseId", data.get("exercise_id"))
        value = data.get("value")
        if not _is_number(value):
            raise RecordValidationError("PR value must be a number")
        plates_weight = data.get("platesWeight", data.get("plates_weight"))
        if plates_weight is not None and not _is_number(plates_weight):
            raise RecordValidationError("Plate weight must be a number")
        exercise = self.get_exercise(exercise_id) if exercise_id else None
        if exercise is None:
            raise RecordValidationError(f"Unknown exercise: {exercise_id}")

        record = PRRecord(
            id=self._new_id(),
            exercise_id=exercise.id,
            value=value,
            date=data.get("date") or self._now(),
            plates_weight=plates_weight,
            bar_type=data.get("barType", data.get("bar_type")),
            notes=data.get("notes"),
        )
        self._pr_records = [*self._pr_records, record]

        if exercise.current_pr is None or record.value > exercise.current_pr:
            raised = replace(
                exercise,
                current_pr=record.value,
                current_pr_plates=record.plates_weight,
            )
            self._exercises = [raised if ex.id == exercise.id else ex for ex in self._exercises]
            logger.info("New PR for %s: %s", exercise.name, record.value)

        await self._persist(
            {Bucket.EXERCISES: self._exercises, Bucket.PR_RECORDS: self._pr_records}
        )
        return record

    # ------------------------------------------------------------------
    # Preferences and sync
    # ------------------------------------------------------------------

    async def update_preferences(self, changes: dict) -> UserPreferences:
        """Merge and persist preferences.

        Turning sync on (or pointing it at another file) writes the full
        current state to the new file, which is authoritative from then on.
        Turning it off makes internal storage authoritative again; the full
        current state is saved there and the sync file is left as it is.
        """
        previous_path = self._preferences.sync_file_path
        self._preferences = self._preferences.merge(changes)
        new_path = self._preferences.sync_file_path

        if new_path != previous_path:
            if new_path:
                logger.info("Switching sync file to %s", new_path)
            else:
                logger.info("Sync disabled, saving locally")
            await self._persist(self._full_state())
        else:
            await self._persist({Bucket.PREFERENCES: self._preferences})
        return self._preferences

    async def set_sync_file(self, path: str | None) -> str | None:
        """Enable sync with a file, or disable it with None.

        A path outside the app's document directory (e.g. from a cloud
        storage picker) is copied in: its contents are read into a new private
        file, its exercises and records are adopted if it is a readable
        snapshot, and the private copy becomes the sync file. The original path
        is never written to. If it cannot be read, the private copy is created
        from the current state.

        Returns:
            The sync file path now in use, or None
        """
        if path is None:
            await self.update_preferences({"sync_file_path": None})
            return None

        sync_path = str(to_path(path))
        if not is_within(path, self.document_dir):
            sync_path = await self._copy_in(path)

        await self.update_preferences({"sync_file_path": sync_path})
        return sync_path

    async def _copy_in(self, source: str) -> str:
        """Adopt a picked file's data and return a new private sync path.

        The private file itself is written by the full-state save that follows.
        """
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
        private_path = str(self.document_dir / f"pr-tracker-sync-{stamp}.json")

        try:
            text = await self.files.read_text(source)
        except OSError as e:
            logger.info("Could not read %s (%s), creating a new sync file", source, e)
            return private_path

        try:
            parsed = load_snapshot(text)
        except SnapshotValidationError as e:
            logger.warning("Selected file is not a usable snapshot, keeping current data: %s", e)
        else:
            self._exercises = parsed.snapshot.exercises
            self._pr_records = parsed.snapshot.pr_records
            logger.info(
                "Adopted %d exercises and %d PRs from %s",
                len(self._exercises),
                len(self._pr_records),
                source,
            )
        return private_path

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def snapshot(self) -> AppSnapshot:
        """Current state as a snapshot."""
        return build_snapshot(self._exercises, self._pr_records, self._preferences)

    def export_snapshot(self) -> bytes:
        """Serialize the current state to snapshot JSON."""
        return dump_snapshot(self.snapshot())

    async def export_to_file(
        self,
        path: str | None = None,
        share: ShareSheet | None = None,
    ) -> str:
        """Write a backup file and optionally hand it to a share sheet.

        Returns:
            The path written
        """
        target = path or str(self.document_dir / backup_filename())
        try:
            await self.files.write_text(target, self.export_snapshot().decode("utf-8"))
        except OSError as e:
            raise StorageWriteError(f"Could not write backup {target}: {e}") from e
        logger.info("Exported %d exercises and %d PRs to %s", len(self._exercises), self.total_prs, target)
        if share is not None:
            await share.share(target, SNAPSHOT_MIME_TYPE)
        return target

    async def import_snapshot(self, data: bytes | str) -> None:
        """Replace exercises and records with those of a snapshot.

        Preferences from the snapshot are merged into the current ones, except
        the sync file path and last sync date, which always stay as they are.

        Raises:
            SnapshotValidationError: If the snapshot fails validation; nothing
                is changed in that case
        """
        parsed = load_snapshot(data)
        self._exercises = parsed.snapshot.exercises
        self._pr_records = parsed.snapshot.pr_records
        if parsed.raw_preferences:
            self._preferences = self._preferences.merge(
                parsed.raw_preferences, skip=NON_IMPORTABLE_FIELDS
            )
        logger.info(
            "Imported %d exercises and %d PR records",
            len(self._exercises),
            len(self._pr_records),
        )
        await self._persist(self._full_state())

    async def import_from_file(self, path: str) -> None:
        """Read a snapshot file and import it."""
        try:
            data = await self.files.read_text(path)
        except OSError as e:
            raise StorageReadError(f"Could not read {path}: {e}") from e
        await self.import_snapshot(data)

    async def import_from_picker(
        self,
        picker: FilePicker,
        token: CancellationToken | None = None,
        fallback_timeout: float | None = 60.0,
    ) -> str:
        """Let the user pick a snapshot file and import it.

        Returns:
            The imported file path

        Raises:
            ImportCancelledError: If no file was picked
        """
        path = await pick_file(picker, token=token, fallback_timeout=fallback_timeout)
        await self.import_from_file(path)
        return path
