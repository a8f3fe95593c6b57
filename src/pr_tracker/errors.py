"""Exception types raised by pr-tracker."""


class PRTrackerError(Exception):
    """Base class for all pr-tracker errors."""


class ValidationError(PRTrackerError):
    """Input was rejected before any state changed."""


class ExerciseValidationError(ValidationError):
    """An exercise could not be created or updated."""


class RecordValidationError(ValidationError):
    """A PR record could not be logged."""


class SnapshotValidationError(ValidationError):
    """An imported snapshot failed a structural check.

    ``check`` names the failed rule so callers can branch on it without
    parsing the message.
    """

    def __init__(self, check: str, message: str) -> None:
        super().__init__(message)
        self.check = check


class StorageError(PRTrackerError):
    """A storage backend failed."""


class StorageReadError(StorageError):
    """Stored data could not be read or parsed."""


class StorageWriteError(StorageError):
    """Data could not be persisted."""


class ImportCancelledError(PRTrackerError):
    """The user closed the file picker without choosing a file."""

    def __init__(self, message: str = "Import cancelled") -> None:
        super().__init__(message)
