"""pr-tracker: personal record tracking with file-based sync."""

__version__ = "0.1.0"
