"""Tests for the sample-data seeding tool."""

import random

import pytest

import seed
from conftest import make_record
from soil_reports.memory import MemorySoilReportStore
from soil_reports.validation import validate_create


def test_random_reports_are_always_valid():
    rng = random.Random(42)
    for _ in range(200):
        report = seed.random_report(rng)
        assert validate_create(report).is_valid, report
        assert report["district"] in seed.DISTRICTS[report["state"]]


def test_unknown_district_falls_back_to_default_village():
    rng = random.Random(0)
    villages = {
        seed.random_report(rng)["village"]
        for _ in range(300)
    }
    assert seed.DEFAULT_VILLAGE in villages


@pytest.mark.asyncio
async def test_seed_clears_then_creates():
    store = MemorySoilReportStore([make_record("old")])

    stats = await seed.seed_reports(store, 7, rng=random.Random(1))

    assert stats.created == 7
    assert stats.failed == 0
    assert len(store) == 7
    assert await store.get_by_id("old") is None


@pytest.mark.asyncio
async def test_seed_keep_preserves_existing_rows():
    store = MemorySoilReportStore([make_record("old")])

    stats = await seed.seed_reports(store, 3, clear=False, rng=random.Random(1))

    assert stats.created == 3
    assert len(store) == 4


def test_parser_defaults():
    args = seed.build_parser().parse_args([])
    assert args.count == 10
    assert args.keep is False


def test_negative_count_exits_with_usage_error():
    assert seed.main(["--count", "-1"]) == 2
