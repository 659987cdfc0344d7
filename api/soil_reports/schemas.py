"""
Pydantic response schemas for soil report endpoints.

Write bodies are taken as plain JSON objects and checked by `validation.py`,
so missing fields, wrong types and out-of-range values come back together.
"""

from __future__ import annotations

from pydantic import BaseModel


class SoilReport(BaseModel):
    id: str
    state: str
    district: str
    village: str
    ph: float
    nitrogen: float
    phosphorus: float
    potassium: float


class SoilReportPage(BaseModel):
    items: list[SoilReport]
    total: int
    page: int
    limit: int
    pages: int
