"""Utility functions for pr-tracker."""

from .plates import PlateCalculation, bar_weight, plate_breakdown, plates_weight_for

__all__ = [
    "bar_weight",
    "plate_breakdown",
    "PlateCalculation",
    "plates_weight_for",
]
