"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from auth import security
from main import create_app
from soil_reports.memory import MemorySoilReportStore

TEST_JWT_SECRET = "test-secret-value-long-enough-for-hs256"


@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    monkeypatch.delenv("SOIL_REPORTS_DEFAULT_LIMIT", raising=False)


@pytest.fixture
def punjab_payload():
    return {
        "state": "Punjab",
        "district": "Ludhiana",
        "village": "Sahnewal",
        "ph": 6.5,
        "nitrogen": 120.5,
        "phosphorus": 60.25,
        "potassium": 100.0,
    }


@pytest.fixture
def store():
    return MemorySoilReportStore()


@pytest.fixture
def client(store):
    app = create_app(store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    token = security.build_access_token(subject="agronomist-1", email="agro@example.com")
    return {"Authorization": f"Bearer {token}"}


def make_record(report_id, **overrides):
    record = {
        "id": report_id,
        "state": "Maharashtra",
        "district": "Pune",
        "village": "Wagholi",
        "ph": 7.0,
        "nitrogen": 200.0,
        "phosphorus": 80.0,
        "potassium": 150.0,
    }
    record.update(overrides)
    return record
