"""Tests for soil report payload validation."""

import math

import pytest

from soil_reports.validation import (
    normalize_payload,
    validate_create,
    validate_update,
)


def _fields(result):
    return [v.field for v in result.violations]


def test_valid_create_payload(punjab_payload):
    result = validate_create(punjab_payload)
    assert result.is_valid
    assert result.violations == []


def test_ph_fifteen_gives_exactly_one_violation(punjab_payload):
    result = validate_create({**punjab_payload, "ph": 15})
    assert not result.is_valid
    assert len(result.violations) == 1
    violation = result.violations[0]
    assert violation.field == "ph"
    assert violation.kind == "range"


@pytest.mark.parametrize("ph", [-0.1, 14.01, 100, -5, math.nan, math.inf])
def test_ph_out_of_range(punjab_payload, ph):
    result = validate_create({**punjab_payload, "ph": ph})
    assert _fields(result) == ["ph"]


@pytest.mark.parametrize("ph", [0, 0.0, 7, 14, 14.0])
def test_ph_bounds_are_inclusive(punjab_payload, ph):
    assert validate_create({**punjab_payload, "ph": ph}).is_valid


@pytest.mark.parametrize("field", ["nitrogen", "phosphorus", "potassium"])
@pytest.mark.parametrize("value", [0, 0.0, -1, -0.01])
def test_nutrients_must_be_positive(punjab_payload, field, value):
    result = validate_create({**punjab_payload, field: value})
    assert _fields(result) == [field]
    assert result.violations[0].kind == "range"
    assert "positive" in result.violations[0].message


def test_nutrient_upper_bound(punjab_payload):
    assert validate_create({**punjab_payload, "nitrogen": 9999.99}).is_valid
    result = validate_create({**punjab_payload, "nitrogen": 10000})
    assert _fields(result) == ["nitrogen"]


@pytest.mark.parametrize("field", ["state", "district", "village"])
@pytest.mark.parametrize("value", ["", "   ", "\t\n"])
def test_blank_location_is_required(punjab_payload, field, value):
    result = validate_create({**punjab_payload, field: value})
    assert _fields(result) == [field]
    assert result.violations[0].kind == "required"


def test_location_too_long(punjab_payload):
    result = validate_create({**punjab_payload, "village": "x" * 101})
    assert _fields(result) == ["village"]
    assert result.violations[0].kind == "too_long"


def test_all_violations_are_collected_in_field_order(punjab_payload):
    payload = {
        **punjab_payload,
        "potassium": 0,
        "state": " ",
        "ph": 20,
        "nitrogen": -3,
    }
    result = validate_create(payload)
    assert _fields(result) == ["state", "ph", "nitrogen", "potassium"]


def test_create_requires_every_field():
    result = validate_create({"state": "Punjab", "ph": 6.5})
    assert _fields(result) == ["district", "village", "nitrogen", "phosphorus", "potassium"]
    assert {v.kind for v in result.violations} == {"required"}


def test_wrong_types_are_reported(punjab_payload):
    result = validate_create({**punjab_payload, "ph": "6.5", "nitrogen": True, "state": 12})
    assert _fields(result) == ["state", "ph", "nitrogen"]
    assert {v.kind for v in result.violations} == {"type"}


def test_unknown_fields_are_rejected(punjab_payload):
    result = validate_create({**punjab_payload, "id": "abc", "moisture": 3})
    assert _fields(result) == ["id", "moisture"]
    assert {v.kind for v in result.violations} == {"unknown_field"}


def test_partial_update_checks_only_supplied_fields():
    assert validate_update({"ph": 5}).is_valid
    result = validate_update({"ph": 5, "phosphorus": 0})
    assert _fields(result) == ["phosphorus"]


def test_partial_update_requires_at_least_one_field():
    result = validate_update({})
    assert len(result.violations) == 1
    assert result.violations[0].field is None
    assert result.violations[0].kind == "empty"


def test_partial_update_rejects_explicit_null():
    result = validate_update({"nitrogen": None})
    assert _fields(result) == ["nitrogen"]
    assert result.violations[0].kind == "type"


def test_normalize_trims_locations_and_floats_numbers():
    normalized = normalize_payload({"state": "  Punjab ", "ph": 7, "nitrogen": 10})
    assert normalized == {"state": "Punjab", "ph": 7.0, "nitrogen": 10.0}
    assert isinstance(normalized["ph"], float)
