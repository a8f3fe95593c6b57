"""Local filesystem access for sync and export files."""

import asyncio
import logging
from pathlib import Path
from tempfile import NamedTemporaryFile

logger = logging.getLogger(__name__)

FILE_URI_PREFIX = "file://"


def to_path(location: str | Path) -> Path:
    """Convert a path or ``file://`` URI into a Path."""
    location = str(location)
    if location.startswith(FILE_URI_PREFIX):
        location = location[len(FILE_URI_PREFIX):]
    return Path(location).expanduser()


def is_within(location: str | Path, directory: Path) -> bool:
    """Check whether a location lies inside a directory."""
    try:
        to_path(location).resolve().relative_to(directory.expanduser().resolve())
    except ValueError:
        return False
    return True


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w", dir=path.parent, delete=False, encoding="utf-8") as tmp:
        tmp.write(text)
        temp_path = Path(tmp.name)
    temp_path.replace(path)


class LocalFileSystem:
    """Reads and writes text files, off the event loop.

    Writes go through a temporary file in the target directory and are moved
    into place, so readers never see a half-written document.
    """

    async def read_text(self, path: str) -> str:
        return await asyncio.to_thread(to_path(path).read_text, encoding="utf-8")

    async def write_text(self, path: str, text: str) -> None:
        target = to_path(path)
        await asyncio.to_thread(_write_atomic, target, text)
        logger.debug("Wrote %d bytes to %s", len(text), target)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(to_path(path).exists)
