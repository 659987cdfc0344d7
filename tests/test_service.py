"""Tests for the soil report lifecycle operations."""

import uuid

import pytest

from soil_reports import service
from soil_reports.errors import NotFoundError, ValidationError
from soil_reports.query import NumericRange, Pagination, SoilReportFilters

pytestmark = pytest.mark.asyncio


async def test_create_assigns_id_and_round_trips(store, punjab_payload):
    created = await service.create(store, punjab_payload)

    assert uuid.UUID(created["id"])
    fetched = await service.get_by_id(store, created["id"])
    assert fetched == created
    for name, value in punjab_payload.items():
        assert fetched[name] == value


async def test_create_trims_location_names(store, punjab_payload):
    created = await service.create(store, {**punjab_payload, "village": "  Sahnewal  "})
    assert created["village"] == "Sahnewal"


async def test_create_rejects_bad_ph_with_single_violation(store, punjab_payload):
    with pytest.raises(ValidationError) as excinfo:
        await service.create(store, {**punjab_payload, "ph": 15})

    violations = excinfo.value.violations
    assert [(v.field, v.kind) for v in violations] == [("ph", "range")]
    assert len(store) == 0


async def test_create_collects_every_violation(store):
    with pytest.raises(ValidationError) as excinfo:
        await service.create(
            store,
            {
                "state": "",
                "district": "Ludhiana",
                "village": "Sahnewal",
                "ph": -1,
                "nitrogen": 0,
                "phosphorus": 1,
                "potassium": 1,
            },
        )
    assert [v.field for v in excinfo.value.violations] == ["state", "ph", "nitrogen"]


async def test_update_changes_only_supplied_fields(store, punjab_payload):
    created = await service.create(store, punjab_payload)

    updated = await service.update(store, created["id"], {"ph": 5})

    assert updated["ph"] == 5.0
    assert {k: v for k, v in updated.items() if k != "ph"} == {
        k: v for k, v in created.items() if k != "ph"
    }
    assert await service.get_by_id(store, created["id"]) == updated


async def test_update_unknown_id_is_not_found(store):
    with pytest.raises(NotFoundError):
        await service.update(store, "missing", {"ph": 5})


async def test_update_checks_existence_before_validation(store):
    # Both problems present: the missing record wins.
    with pytest.raises(NotFoundError):
        await service.update(store, "missing", {"ph": 50})


async def test_invalid_update_leaves_record_untouched(store, punjab_payload):
    created = await service.create(store, punjab_payload)

    with pytest.raises(ValidationError):
        await service.update(store, created["id"], {"ph": 5, "potassium": -2})

    assert await service.get_by_id(store, created["id"]) == created


async def test_empty_update_is_rejected(store, punjab_payload):
    created = await service.create(store, punjab_payload)
    with pytest.raises(ValidationError) as excinfo:
        await service.update(store, created["id"], {})
    assert excinfo.value.violations[0].kind == "empty"


async def test_delete_then_get_is_not_found(store, punjab_payload):
    created = await service.create(store, punjab_payload)

    await service.delete(store, created["id"])

    with pytest.raises(NotFoundError):
        await service.get_by_id(store, created["id"])


async def test_second_delete_is_an_error(store, punjab_payload):
    created = await service.create(store, punjab_payload)
    await service.delete(store, created["id"])

    with pytest.raises(NotFoundError):
        await service.delete(store, created["id"])


async def test_returned_records_are_copies(store, punjab_payload):
    created = await service.create(store, punjab_payload)
    created["ph"] = 1.0

    fetched = await service.get_by_id(store, created["id"])
    assert fetched["ph"] == 6.5


async def test_list_reports_filters_by_state_and_ph(store, punjab_payload):
    for ph in (5.5, 6.0, 7.2, 8.0, 8.5):
        await service.create(store, {**punjab_payload, "state": "Maharashtra", "ph": ph})
    await service.create(store, {**punjab_payload, "ph": 7.0})

    page = await service.list_reports(
        store,
        SoilReportFilters(state="Maharashtra", ph=NumericRange(6, 8)),
    )

    assert page.total == 3
    assert sorted(r["ph"] for r in page.items) == [6.0, 7.2, 8.0]
    assert all(r["state"] == "Maharashtra" for r in page.items)


async def test_list_reports_pages(store, punjab_payload):
    for _ in range(25):
        await service.create(store, punjab_payload)

    page3 = await service.list_reports(store, pagination=Pagination(page=3, limit=10))
    page4 = await service.list_reports(store, pagination=Pagination(page=4, limit=10))

    assert len(page3.items) == 5
    assert page4.items == []
    assert page3.total == page4.total == 25
