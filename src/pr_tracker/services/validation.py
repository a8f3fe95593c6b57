"""Structural validation of untrusted snapshots."""

import json
import math

from ..errors import SnapshotValidationError
from ..models import ExerciseCategory, MeasurementUnit

REQUIRED_EXERCISE_FIELDS = ("id", "name", "category", "unit")
REQUIRED_RECORD_FIELDS = ("id", "exerciseId", "date")


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _exercise_problem(exercise) -> str | None:
    if not isinstance(exercise, dict):
        return "is not an object"
    for key in REQUIRED_EXERCISE_FIELDS:
        if not exercise.get(key):
            return f"is missing '{key}'"
    if not isinstance(exercise["name"], str):
        return "has a non-text name"
    if exercise["category"] not in {c.value for c in ExerciseCategory}:
        return f"has an unknown category '{exercise['category']}'"
    if exercise["unit"] not in {u.value for u in MeasurementUnit}:
        return f"has an unknown unit '{exercise['unit']}'"
    for key in ("currentPR", "currentPRPlates"):
        if exercise.get(key) is not None and not _is_number(exercise[key]):
            return f"has a non-numeric '{key}'"
    return None


def _record_problem(record) -> str | None:
    if not isinstance(record, dict):
        return "is not an object"
    for key in ("id", "exerciseId"):
        if not record.get(key):
            return f"is missing '{key}'"
    if not _is_number(record.get("value")):
        return "has no numeric 'value'"
    if record.get("platesWeight") is not None and not _is_number(record["platesWeight"]):
        return "has a non-numeric 'platesWeight'"
    if not record.get("date") or not isinstance(record["date"], str):
        return "is missing 'date'"
    return None


def parse_snapshot_json(data: bytes | str) -> dict:
    """Parse and validate snapshot JSON.

    Checks run in order and the first failure is raised:

    1. the payload is valid JSON
    2. it is an object
    3. it has a version
    4. ``exercises`` is a list
    5. ``prRecords`` is a list
    6. every exercise has id, name, category and unit, and numeric PR
       values when present
    7. every record has id, exerciseId, a numeric value and a date, and a
       numeric plate weight when present

    Returns:
        The parsed snapshot dictionary

    Raises:
        SnapshotValidationError: With a message suitable for the user
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise SnapshotValidationError(
                "invalid_json",
                "Invalid JSON file. Make sure you selected a valid backup file.",
            ) from e
    try:
        payload = json.loads(data)
    except ValueError as e:
        raise SnapshotValidationError(
            "invalid_json",
            "Invalid JSON file. Make sure you selected a valid backup file.",
        ) from e
    return validate_snapshot(payload)


def validate_snapshot(payload) -> dict:
    """Validate an already-parsed snapshot structure (checks 2 to 7)."""
    if not isinstance(payload, dict):
        raise SnapshotValidationError(
            "not_object", "Invalid data format: the backup must be a JSON object."
        )

    if not payload.get("version"):
        raise SnapshotValidationError(
            "missing_version", "Invalid backup file: missing version number."
        )

    if not isinstance(payload.get("exercises"), list):
        raise SnapshotValidationError(
            "exercises_not_list", "Invalid backup file: exercise data is corrupted."
        )

    if not isinstance(payload.get("prRecords"), list):
        raise SnapshotValidationError(
            "records_not_list", "Invalid backup file: PR data is corrupted."
        )

    for index, exercise in enumerate(payload["exercises"], start=1):
        problem = _exercise_problem(exercise)
        if problem:
            raise SnapshotValidationError(
                "invalid_exercise",
                f"Corrupted exercise data: exercise #{index} {problem}. Check the backup file.",
            )

    for index, record in enumerate(payload["prRecords"], start=1):
        problem = _record_problem(record)
        if problem:
            raise SnapshotValidationError(
                "invalid_record",
                f"Corrupted PR data: record #{index} {problem}. Check the backup file.",
            )

    preferences = payload.get("preferences")
    if preferences is not None and not isinstance(preferences, dict):
        payload = {**payload, "preferences": None}

    return payload
