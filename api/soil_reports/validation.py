"""
Field-level validation for soil report payloads.

Validation never raises for bad input: it returns a `ValidationResult` with
every violation found, in canonical field order. The service decides what to
do with an invalid result.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import Violation

LOCATION_FIELDS = ("state", "district", "village")
NUTRIENT_FIELDS = ("nitrogen", "phosphorus", "potassium")
MEASUREMENT_FIELDS = ("ph",) + NUTRIENT_FIELDS
MUTABLE_FIELDS = LOCATION_FIELDS + MEASUREMENT_FIELDS

PH_MIN = 0.0
PH_MAX = 14.0
NUTRIENT_MAX = 9999.99
LOCATION_MAX_LENGTH = 100

RANGE = "range"
REQUIRED = "required"
TOO_LONG = "too_long"
TYPE = "type"
UNKNOWN_FIELD = "unknown_field"
EMPTY = "empty"

_LABELS = {
    "state": "State name",
    "district": "District name",
    "village": "Village name",
    "ph": "pH",
    "nitrogen": "Nitrogen content",
    "phosphorus": "Phosphorus content",
    "potassium": "Potassium content",
}


@dataclass(frozen=True)
class ValidationResult:
    violations: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a measurement.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_location(name: str, value: Any) -> Violation | None:
    label = _LABELS[name]
    if not isinstance(value, str):
        return Violation(name, TYPE, f"{label} must be a string")
    stripped = value.strip()
    if not stripped:
        return Violation(name, REQUIRED, f"{label} is required")
    if len(stripped) > LOCATION_MAX_LENGTH:
        return Violation(name, TOO_LONG, f"{label} cannot exceed {LOCATION_MAX_LENGTH} characters")
    return None


def _check_ph(value: Any) -> Violation | None:
    if not _is_number(value):
        return Violation("ph", TYPE, "pH must be a number")
    # NaN fails both comparisons.
    if not (PH_MIN <= value <= PH_MAX):
        return Violation("ph", RANGE, "pH must be between 0 and 14")
    return None


def _check_nutrient(name: str, value: Any) -> Violation | None:
    label = _LABELS[name]
    if not _is_number(value):
        return Violation(name, TYPE, f"{label} must be a number")
    if math.isnan(value) or value <= 0:
        return Violation(name, RANGE, f"{label} must be positive")
    if value > NUTRIENT_MAX:
        return Violation(name, RANGE, f"{label} cannot exceed {NUTRIENT_MAX}")
    return None


def _check_field(name: str, value: Any) -> Violation | None:
    if name in LOCATION_FIELDS:
        return _check_location(name, value)
    if name == "ph":
        return _check_ph(value)
    return _check_nutrient(name, value)


def validate_payload(payload: Mapping[str, Any], *, partial: bool) -> ValidationResult:
    """
    Validate a create (`partial=False`) or update (`partial=True`) payload.

    Create requires every mutable field. Update requires at least one and
    checks only the fields supplied. Keys outside the mutable set are
    reported as unknown.
    """
    violations: list[Violation] = []

    unknown = sorted(key for key in payload if key not in MUTABLE_FIELDS)
    for key in unknown:
        violations.append(Violation(key, UNKNOWN_FIELD, f"Unknown field: {key}"))

    supplied = [name for name in MUTABLE_FIELDS if name in payload]
    if partial and not supplied:
        violations.append(Violation(None, EMPTY, "At least one field must be provided"))
        return ValidationResult(violations)

    for name in MUTABLE_FIELDS:
        if name not in payload:
            if not partial:
                violations.append(Violation(name, REQUIRED, f"{_LABELS[name]} is required"))
            continue
        violation = _check_field(name, payload[name])
        if violation is not None:
            violations.append(violation)

    return ValidationResult(violations)


def validate_create(payload: Mapping[str, Any]) -> ValidationResult:
    return validate_payload(payload, partial=False)


def validate_update(payload: Mapping[str, Any]) -> ValidationResult:
    return validate_payload(payload, partial=True)


def normalize_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Copy the mutable fields out of a valid payload, trimming location names
    and coercing measurements to float.
    """
    normalized: dict[str, Any] = {}
    for name in MUTABLE_FIELDS:
        if name not in payload:
            continue
        value = payload[name]
        normalized[name] = value.strip() if name in LOCATION_FIELDS else float(value)
    return normalized
