"""File picker integration with explicit cancellation.

A picker that reports cancellation definitively (returns ``None`` or the
caller cancels the token) ends the wait immediately. For platforms without a
definitive signal, ``pick_file`` can fall back to a timeout: if nothing was
picked within ``fallback_timeout`` seconds the import is treated as cancelled.
The fallback is best-effort; a slow user may be reported as having cancelled.
Platform code may also call ``token.cancel()`` when the app regains focus
without a selection.
"""

import asyncio
import logging
from typing import Protocol, runtime_checkable

from ..errors import ImportCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Signals that a pending pick should be abandoned."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Import cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@runtime_checkable
class FilePicker(Protocol):
    """Lets the user choose zero or one file.

    ``reports_cancellation`` is True when ``pick`` reliably returns None on
    cancellation; otherwise a fallback timeout applies.
    """

    reports_cancellation: bool

    async def pick(self, token: CancellationToken) -> str | None:
        ...


async def pick_file(
    picker: FilePicker,
    token: CancellationToken | None = None,
    fallback_timeout: float | None = None,
) -> str:
    """Run a picker until it returns a path or is cancelled.

    Args:
        picker: The platform file picker
        token: Token the caller can use to abandon the pick
        fallback_timeout: Seconds to wait when the picker cannot report
            cancellation itself; ignored for pickers that can

    Returns:
        The selected file path

    Raises:
        ImportCancelledError: If no file was selected
    """
    token = token or CancellationToken()
    timeout = None if picker.reports_cancellation else fallback_timeout

    pick_task = asyncio.ensure_future(picker.pick(token))
    cancel_task = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait(
            {pick_task, cancel_task},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        # Also reached when the caller itself is cancelled
        cancel_task.cancel()
        pick_task.cancel()

    if pick_task in done:
        path = pick_task.result()
        if path:
            return path
        logger.info("File picker closed without a selection")
        raise ImportCancelledError()

    if token.cancelled:
        logger.info("File pick cancelled: %s", token.reason)
        raise ImportCancelledError(token.reason or "Import cancelled")

    logger.info("No file picked within %.0fs, assuming cancelled", timeout)
    raise ImportCancelledError()
