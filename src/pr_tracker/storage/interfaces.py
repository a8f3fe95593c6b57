"""Protocols for the platform services the storage layer depends on."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """String-keyed, string-valued persistent store scoped to the installation."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    async def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is not an error."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Text file access by path.

    Implementations raise FileNotFoundError or PermissionError (or another
    OSError) when a path cannot be read or written.
    """

    async def read_text(self, path: str) -> str:
        ...

    async def write_text(self, path: str, text: str) -> None:
        ...

    async def exists(self, path: str) -> bool:
        ...
