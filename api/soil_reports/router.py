"""
Soil report API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status

from auth import dependencies as auth_dependencies

from . import query, schemas, service
from .dependencies import get_store
from .store import SoilReportStore

router = APIRouter(prefix="/soil-reports")


def _filters(
    state: str | None = Query(default=None, max_length=100),
    district: str | None = Query(default=None, max_length=100),
    village: str | None = Query(default=None, max_length=100),
    ph_min: float | None = Query(default=None, alias="phMin"),
    ph_max: float | None = Query(default=None, alias="phMax"),
    nitrogen_min: float | None = Query(default=None, alias="nitrogenMin"),
    nitrogen_max: float | None = Query(default=None, alias="nitrogenMax"),
    phosphorus_min: float | None = Query(default=None, alias="phosphorusMin"),
    phosphorus_max: float | None = Query(default=None, alias="phosphorusMax"),
    potassium_min: float | None = Query(default=None, alias="potassiumMin"),
    potassium_max: float | None = Query(default=None, alias="potassiumMax"),
) -> query.SoilReportFilters:
    return query.SoilReportFilters(
        state=state or None,
        district=district or None,
        village=village or None,
        ph=query.NumericRange(ph_min, ph_max),
        nitrogen=query.NumericRange(nitrogen_min, nitrogen_max),
        phosphorus=query.NumericRange(phosphorus_min, phosphorus_max),
        potassium=query.NumericRange(potassium_min, potassium_max),
    )


@router.get("", response_model=schemas.SoilReportPage)
async def list_soil_reports(
    filters: query.SoilReportFilters = Depends(_filters),
    page: int = 1,
    limit: int | None = None,
    sort: str | None = None,
    order: str | None = None,
    store: SoilReportStore = Depends(get_store),
    _: dict = Depends(auth_dependencies.get_current_principal),
) -> dict:
    result = await service.list_reports(
        store,
        filters,
        query.Pagination(page=page, limit=limit),
        query.parse_sort(sort, order),
    )
    return {
        "items": result.items,
        "total": result.total,
        "page": result.page,
        "limit": result.limit,
        "pages": result.pages,
    }


@router.get("/{report_id}", response_model=schemas.SoilReport)
async def get_soil_report(
    report_id: str,
    store: SoilReportStore = Depends(get_store),
    _: dict = Depends(auth_dependencies.get_current_principal),
) -> dict:
    return await service.get_by_id(store, report_id)


@router.post("", response_model=schemas.SoilReport, status_code=status.HTTP_201_CREATED)
async def create_soil_report(
    payload: dict[str, Any] = Body(...),
    store: SoilReportStore = Depends(get_store),
    _: dict = Depends(auth_dependencies.get_current_principal),
) -> dict:
    # The raw object goes to the validator so every violation is reported together.
    return await service.create(store, payload)


@router.patch("/{report_id}", response_model=schemas.SoilReport)
@router.put("/{report_id}", response_model=schemas.SoilReport)
async def update_soil_report(
    report_id: str,
    payload: dict[str, Any] = Body(...),
    store: SoilReportStore = Depends(get_store),
    _: dict = Depends(auth_dependencies.get_current_principal),
) -> dict:
    # Only fields the client actually sent take part in the update.
    return await service.update(store, report_id, payload)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_soil_report(
    report_id: str,
    store: SoilReportStore = Depends(get_store),
    _: dict = Depends(auth_dependencies.get_current_principal),
) -> Response:
    await service.delete(store, report_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
