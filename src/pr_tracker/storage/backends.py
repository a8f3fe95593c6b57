"""Interchangeable storage backends.

Two backends hold the same three buckets of state:

- ``InternalBackend`` keeps each bucket as its own JSON value in a key-value
  store, so buckets can be read and written independently.
- ``ExternalFileBackend`` keeps the whole snapshot in one JSON file. The file
  has no partial-update capability, so every write reads the current document,
  overlays the changed buckets and rewrites the file. A file that exists but
  cannot be read is never overwritten.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..errors import StorageReadError, StorageWriteError
from ..models import AppSnapshot, Exercise, PRRecord, UserPreferences, now_iso
from .interfaces import FileSystem, KeyValueStore

logger = logging.getLogger(__name__)


class Bucket(str, Enum):
    """Named subsets of persisted state."""

    EXERCISES = "exercises"
    PR_RECORDS = "prRecords"
    PREFERENCES = "preferences"


@dataclass
class StoreState:
    """Buckets read from a backend; None means the bucket was not stored."""

    exercises: list[Exercise] | None = None
    pr_records: list[PRRecord] | None = None
    preferences: UserPreferences | None = None

    def get(self, bucket: Bucket) -> Any:
        return getattr(self, _ATTRIBUTES[bucket])

    def set(self, bucket: Bucket, value: Any) -> None:
        setattr(self, _ATTRIBUTES[bucket], value)


_ATTRIBUTES = {
    Bucket.EXERCISES: "exercises",
    Bucket.PR_RECORDS: "pr_records",
    Bucket.PREFERENCES: "preferences",
}


def encode_bucket(bucket: Bucket, value: Any) -> Any:
    """Convert a bucket value to its JSON-compatible form."""
    if bucket == Bucket.PREFERENCES:
        return value.to_dict()
    return [item.to_dict() for item in value]


def decode_bucket(bucket: Bucket, raw: Any) -> Any:
    """Convert a JSON-compatible bucket value back into models."""
    if bucket == Bucket.PREFERENCES:
        if not isinstance(raw, dict):
            raise TypeError("preferences must be an object")
        return UserPreferences.from_dict(raw)
    if not isinstance(raw, list):
        raise TypeError(f"{bucket.value} must be a list")
    if bucket == Bucket.EXERCISES:
        return [Exercise.from_dict(item) for item in raw]
    return [PRRecord.from_dict(item) for item in raw]


class StorageBackend(ABC):
    """Read-all/write-all access to the named buckets."""

    name: str = "backend"

    @abstractmethod
    async def read_all(self) -> StoreState:
        """Read every stored bucket.

        Raises:
            StorageReadError: If the store cannot be read or parsed
        """

    @abstractmethod
    async def write_all(self, partial: dict[Bucket, Any]) -> None:
        """Persist the given buckets, leaving the others as stored.

        Raises:
            StorageWriteError: If the data could not be persisted
        """

    async def read_bucket(self, bucket: Bucket) -> Any:
        """Read a single bucket (None if not stored)."""
        state = await self.read_all()
        return state.get(bucket)

    async def write_bucket(self, bucket: Bucket, value: Any) -> None:
        """Persist a single bucket."""
        await self.write_all({bucket: value})

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class InternalBackend(StorageBackend):
    """Buckets stored independently in the installation's key-value store."""

    name = "internal"

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def read_bucket(self, bucket: Bucket) -> Any:
        try:
            raw = await self.store.get(bucket.value)
        except Exception as e:  # noqa: BLE001
            raise StorageReadError(f"Could not read '{bucket.value}' from internal storage: {e}") from e
        if raw is None:
            return None
        try:
            return decode_bucket(bucket, json.loads(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise StorageReadError(f"Stored '{bucket.value}' data is corrupted: {e}") from e

    async def read_all(self) -> StoreState:
        state = StoreState()
        for bucket in Bucket:
            state.set(bucket, await self.read_bucket(bucket))
        return state

    async def write_all(self, partial: dict[Bucket, Any]) -> None:
        for bucket, value in partial.items():
            payload = json.dumps(encode_bucket(bucket, value))
            try:
                await self.store.set(bucket.value, payload)
            except Exception as e:  # noqa: BLE001
                raise StorageWriteError(f"Could not save '{bucket.value}' to internal storage: {e}") from e
        logger.debug("Saved %s to internal storage", ", ".join(b.value for b in partial))


class ExternalFileBackend(StorageBackend):
    """The whole snapshot stored as one JSON document at a user-chosen path."""

    name = "external"

    def __init__(self, files: FileSystem, path: str):
        self.files = files
        self.path = path

    async def exists(self) -> bool:
        """Whether the sync file is present."""
        return await self.files.exists(self.path)

    async def read_document(self) -> dict:
        """Read and parse the raw JSON document."""
        try:
            text = await self.files.read_text(self.path)
        except OSError as e:
            raise StorageReadError(f"Could not read sync file {self.path}: {e}") from e
        try:
            document = json.loads(text)
        except ValueError as e:
            raise StorageReadError(f"Sync file {self.path} is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise StorageReadError(f"Sync file {self.path} does not contain a snapshot object")
        return document

    async def read_all(self) -> StoreState:
        document = await self.read_document()
        state = StoreState()
        for bucket in Bucket:
            raw = document.get(bucket.value)
            if raw is None:
                continue
            try:
                state.set(bucket, decode_bucket(bucket, raw))
            except (KeyError, TypeError, ValueError) as e:
                raise StorageReadError(
                    f"Sync file {self.path} has corrupted '{bucket.value}' data: {e}"
                ) from e
        return state

    async def write_all(self, partial: dict[Bucket, Any]) -> None:
        if await self.exists():
            try:
                state = await self.read_all()
            except StorageReadError as e:
                # Rewriting would replace the buckets we could not read
                raise StorageWriteError(
                    f"Sync file {self.path} could not be read, not overwriting it: {e}"
                ) from e
        else:
            logger.info("Starting a new sync document at %s", self.path)
            state = StoreState()

        for bucket, value in partial.items():
            state.set(bucket, value)

        await self.write_snapshot(
            AppSnapshot(
                exercises=state.exercises or [],
                pr_records=state.pr_records or [],
                preferences=state.preferences or UserPreferences(),
                last_sync=now_iso(),
            )
        )

    async def write_snapshot(self, snapshot: AppSnapshot) -> None:
        """Rewrite the whole document from a snapshot."""
        text = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)
        try:
            await self.files.write_text(self.path, text)
        except OSError as e:
            raise StorageWriteError(f"Could not write sync file {self.path}: {e}") from e
        logger.info(
            "Saved sync file %s: %d exercises, %d PRs",
            self.path,
            len(snapshot.exercises),
            len(snapshot.pr_records),
        )
