"""Bar weights and plate breakdowns."""

from dataclasses import dataclass, field

PLATE_WEIGHTS = {
    "lbs": (45, 35, 25, 10, 5, 2.5),
    "kg": (20, 15, 10, 5, 2.5, 1.25),
}

BAR_WEIGHTS = {
    "standard": {"kg": 20, "lbs": 45},
    "women": {"kg": 15, "lbs": 35},
    "training": {"kg": 15, "lbs": 35},
    "none": {"kg": 0, "lbs": 0},
}


def _key(value) -> str:
    # Enum members and plain strings are both accepted
    return getattr(value, "value", value)


def format_plate(weight: float) -> str:
    """Format a plate weight as a breakdown key: 45 -> "45", 2.5 -> "2.5"."""
    return f"{weight:g}"


@dataclass
class PlateCalculation:
    """Result of splitting a total weight into bar and plates."""

    total_weight: float
    bar_weight: float
    plate_weight: float
    plates_per_side: dict[str, int] = field(default_factory=dict)

    @property
    def weight_per_side(self) -> float:
        return self.plate_weight / 2

    def to_dict(self) -> dict:
        return {
            "totalWeight": self.total_weight,
            "barWeight": self.bar_weight,
            "plateWeight": self.plate_weight,
            "platesPerSide": dict(self.plates_per_side),
        }


def bar_weight(bar_type, unit) -> float:
    """Look up the weight of a bar type in kg or lbs.

    Unknown bar types, and units that are not weights, yield 0.
    """
    return BAR_WEIGHTS.get(_key(bar_type), {}).get(_key(unit), 0)


def plate_breakdown(total_weight: float, bar_weight: float, unit) -> PlateCalculation:
    """Split a target weight into plates per side.

    Uses a greedy algorithm over the standard plate denominations, largest
    first. Any remainder smaller than the smallest plate is dropped.
    """
    plate_weight = total_weight - bar_weight
    remaining = plate_weight / 2
    plates_per_side: dict[str, int] = {}

    for plate in PLATE_WEIGHTS["kg" if _key(unit) == "kg" else "lbs"]:
        count = int(remaining // plate) if remaining > 0 else 0
        if count > 0:
            plates_per_side[format_plate(plate)] = count
            remaining -= count * plate

    return PlateCalculation(
        total_weight=total_weight,
        bar_weight=bar_weight,
        plate_weight=plate_weight,
        plates_per_side=plates_per_side,
    )


def plates_weight_for(total_weight: float, bar_type, unit) -> float | None:
    """Plate-only contribution of a barbell lift.

    Returns None without a bar, for units that are not weights, or when
    nothing is loaded on the bar.
    """
    if bar_type is None or _key(bar_type) == "none" or _key(unit) not in PLATE_WEIGHTS:
        return None
    plates = total_weight - bar_weight(bar_type, unit)
    return plates if plates > 0 else None
