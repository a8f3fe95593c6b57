"""Storage layer for pr-tracker."""

from .backends import (
    Bucket,
    ExternalFileBackend,
    InternalBackend,
    StorageBackend,
    StoreState,
)
from .files import LocalFileSystem
from .interfaces import FileSystem, KeyValueStore
from .kv_store import MemoryKeyValueStore, SqliteKeyValueStore, init_db

__all__ = [
    "Bucket",
    "ExternalFileBackend",
    "FileSystem",
    "init_db",
    "InternalBackend",
    "KeyValueStore",
    "LocalFileSystem",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "StorageBackend",
    "StoreState",
]
