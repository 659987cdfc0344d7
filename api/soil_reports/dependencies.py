"""
Request-scoped dependencies for soil report routes.
"""

from __future__ import annotations

from fastapi import Request

from .store import SoilReportStore


def get_store(request: Request) -> SoilReportStore:
    store = getattr(request.app.state, "soil_store", None)
    if store is None:
        raise RuntimeError("Soil report store is not initialized.")
    return store
