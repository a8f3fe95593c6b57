"""User preferences model."""

from dataclasses import dataclass, replace
from enum import Enum


class WeightUnit(str, Enum):
    """Units available as the default for new exercises."""

    KG = "kg"
    LBS = "lbs"


class DefaultBarType(str, Enum):
    """Bar types available as the default for new barbell exercises."""

    STANDARD = "standard"
    WOMEN = "women"
    TRAINING = "training"


class ThemeColor(str, Enum):
    """Accent color of the app theme."""

    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    PINK = "pink"
    YELLOW = "yellow"


class ThemeMode(str, Enum):
    """Dark or light appearance."""

    DARK = "dark"
    LIGHT = "light"


# Snapshot key -> attribute name
_FIELD_KEYS = {
    "defaultUnit": "default_unit",
    "defaultBarType": "default_bar_type",
    "themeColor": "theme_color",
    "themeMode": "theme_mode",
    "syncFilePath": "sync_file_path",
    "lastSyncDate": "last_sync_date",
}

# Fields never taken from an imported snapshot
NON_IMPORTABLE_FIELDS = frozenset({"sync_file_path", "last_sync_date"})


def _enum_or_default(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class UserPreferences:
    """Process-wide configuration.

    A set ``sync_file_path`` makes the external sync file the authoritative
    store; when it is ``None`` the internal key-value store is authoritative.
    """

    default_unit: WeightUnit = WeightUnit.LBS
    default_bar_type: DefaultBarType = DefaultBarType.STANDARD
    theme_color: ThemeColor = ThemeColor.GREEN
    theme_mode: ThemeMode = ThemeMode.DARK
    sync_file_path: str | None = None
    last_sync_date: str | None = None

    @property
    def sync_enabled(self) -> bool:
        return bool(self.sync_file_path)

    def to_dict(self) -> dict:
        """Convert to the snapshot representation."""
        data = {
            "defaultUnit": self.default_unit.value,
            "defaultBarType": self.default_bar_type.value,
            "themeColor": self.theme_color.value,
            "themeMode": self.theme_mode.value,
        }
        if self.sync_file_path:
            data["syncFilePath"] = self.sync_file_path
        if self.last_sync_date:
            data["lastSyncDate"] = self.last_sync_date
        return data

    @classmethod
    def from_dict(cls, data: dict | None) -> "UserPreferences":
        """Create from the snapshot representation, filling in defaults."""
        return cls().merge(data or {})

    def merge(self, changes: dict, *, skip: frozenset[str] = frozenset()) -> "UserPreferences":
        """Return a copy with ``changes`` applied.

        Keys may be attribute names or snapshot keys. Unknown keys are ignored
        and unrecognized enum values keep the current setting. Attributes named
        in ``skip`` are left untouched.
        """
        updates = {}
        for key, value in changes.items():
            attr = _FIELD_KEYS.get(key, key)
            if attr in skip or attr not in _FIELD_KEYS.values():
                continue
            if attr == "default_unit":
                value = _enum_or_default(WeightUnit, value, self.default_unit)
            elif attr == "default_bar_type":
                value = _enum_or_default(DefaultBarType, value, self.default_bar_type)
            elif attr == "theme_color":
                value = _enum_or_default(ThemeColor, value, self.theme_color)
            elif attr == "theme_mode":
                value = _enum_or_default(ThemeMode, value, self.theme_mode)
            else:
                value = value or None
            updates[attr] = value
        return replace(self, **updates)
