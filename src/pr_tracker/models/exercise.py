"""Exercise definitions."""

import math
from dataclasses import dataclass
from enum import Enum


class ExerciseCategory(str, Enum):
    """Kind of movement being tracked."""

    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    BODYWEIGHT = "bodyweight"
    CARDIO = "cardio"
    OTHER = "other"


class BarType(str, Enum):
    """Barbell variants with a fixed standard weight."""

    STANDARD = "standard"  # 20 kg / 45 lbs
    WOMEN = "women"  # 15 kg / 35 lbs
    TRAINING = "training"  # 15 kg / 35 lbs
    NONE = "none"


class MeasurementUnit(str, Enum):
    """Unit a PR value is measured in."""

    KG = "kg"
    LBS = "lbs"
    REPS = "reps"
    TIME = "time"

    @property
    def is_weight(self) -> bool:
        return self in (MeasurementUnit.KG, MeasurementUnit.LBS)


def normalize_name(name: str) -> str:
    """Normalize an exercise name for uniqueness checks."""
    return name.strip().lower()


def _optional_number(value, field: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"{field} must be a number, got {value!r}")
    return value


def _optional_bar_type(value) -> BarType | None:
    if value is None:
        return None
    try:
        return BarType(value)
    except ValueError:
        return None


@dataclass
class Exercise:
    """A trackable movement with its cached current best.

    ``current_pr`` is the running maximum of the exercise's PR records and
    ``current_pr_plates`` the plate-only weight of the record that set it.
    """

    id: str
    name: str
    category: ExerciseCategory
    unit: MeasurementUnit
    bar_type: BarType | None = None
    current_pr: float | None = None
    current_pr_plates: float | None = None
    notes: str | None = None

    def to_dict(self) -> dict:
        """Convert to the snapshot representation."""
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "unit": self.unit.value,
        }
        if self.bar_type is not None:
            data["barType"] = self.bar_type.value
        if self.current_pr is not None:
            data["currentPR"] = self.current_pr
        if self.current_pr_plates is not None:
            data["currentPRPlates"] = self.current_pr_plates
        if self.notes:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create from the snapshot representation."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            category=ExerciseCategory(data["category"]),
            unit=MeasurementUnit(data["unit"]),
            bar_type=_optional_bar_type(data.get("barType")),
            current_pr=_optional_number(data.get("currentPR"), "currentPR"),
            current_pr_plates=_optional_number(data.get("currentPRPlates"), "currentPRPlates"),
            notes=data.get("notes"),
        )

    def merge(self, changes: dict) -> "Exercise":
        """Return a copy with ``changes`` applied.

        Accepts either attribute names (``current_pr``) or snapshot keys
        (``currentPR``). The id is never changed. Moving away from the barbell
        category resets any bar type to ``none``, as for new exercises.

        Raises:
            KeyError: For an unknown field
            ValueError: For an invalid enum or non-numeric PR value
        """
        data = self.to_dict()
        for key, value in changes.items():
            snapshot_key = _ATTRIBUTE_TO_KEY.get(key, key)
            if snapshot_key not in _KEY_TO_ATTRIBUTE:
                raise KeyError(f"Unknown exercise field: {key}")
            if snapshot_key == "id":
                continue
            if isinstance(value, Enum):
                value = value.value
            if value is None:
                data.pop(snapshot_key, None)
            else:
                data[snapshot_key] = value
        if data.get("category") != ExerciseCategory.BARBELL.value and data.get("barType") is not None:
            data["barType"] = BarType.NONE.value
        return Exercise.from_dict(data)

    def get_display_pr(self) -> str:
        """Get a human-readable current PR string."""
        if self.current_pr is None:
            return "No PR"
        return f"{self.current_pr:g} {self.unit.value}"


_ATTRIBUTE_TO_KEY = {
    "id": "id",
    "name": "name",
    "category": "category",
    "unit": "unit",
    "bar_type": "barType",
    "current_pr": "currentPR",
    "current_pr_plates": "currentPRPlates",
    "notes": "notes",
}


@dataclass
class ExerciseDraft:
    """Fields supplied when creating an exercise (no id yet)."""

    name: str
    category: ExerciseCategory = ExerciseCategory.OTHER
    unit: MeasurementUnit = MeasurementUnit.LBS
    bar_type: BarType | None = None
    current_pr: float | None = None
    current_pr_plates: float | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseDraft":
        """Create from a snapshot-style or attribute-style dictionary."""
        normalized = {_KEY_TO_ATTRIBUTE.get(k, k): v for k, v in data.items()}
        normalized.pop("id", None)
        return cls(
            name=normalized.get("name", ""),
            category=ExerciseCategory(normalized.get("category", ExerciseCategory.OTHER)),
            unit=MeasurementUnit(normalized.get("unit", MeasurementUnit.LBS)),
            bar_type=_optional_bar_type(normalized.get("bar_type")),
            current_pr=_optional_number(normalized.get("current_pr"), "currentPR"),
            current_pr_plates=_optional_number(normalized.get("current_pr_plates"), "currentPRPlates"),
            notes=normalized.get("notes"),
        )

    def build(self, id: str) -> Exercise:
        """Materialize into an Exercise with the given id."""
        bar_type = self.bar_type
        if self.category != ExerciseCategory.BARBELL:
            bar_type = BarType.NONE if bar_type is not None else None
        return Exercise(
            id=id,
            name=self.name.strip(),
            category=self.category,
            unit=self.unit,
            bar_type=bar_type,
            current_pr=_optional_number(self.current_pr, "currentPR"),
            current_pr_plates=_optional_number(self.current_pr_plates, "currentPRPlates"),
            notes=self.notes,
        )


_KEY_TO_ATTRIBUTE = {v: k for k, v in _ATTRIBUTE_TO_KEY.items()}
