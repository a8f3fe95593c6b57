"""CLI commands for pr-tracker."""

from .exercises import exercise
from .export import export
from .import_data import import_data
from .init import init
from .plates import plates
from .prefs import prefs
from .records import pr
from .sync import sync

__all__ = [
    "exercise",
    "export",
    "import_data",
    "init",
    "plates",
    "pr",
    "prefs",
    "sync",
]
