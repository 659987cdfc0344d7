"""
Soil report business logic.

Scope:
- create / update / delete / fetch single reports
- filtered, sorted, paginated listings (see `query.py`)

Every operation takes the store explicitly; nothing here holds state.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from . import query, validation
from .errors import NotFoundError, ValidationError
from .store import SoilReportStore

logger = logging.getLogger(__name__)


def new_report_id() -> str:
    return str(uuid.uuid4())


async def get_by_id(store: SoilReportStore, report_id: str) -> dict[str, Any]:
    report = await store.get_by_id(report_id)
    if report is None:
        raise NotFoundError(report_id)
    return report


async def list_reports(
    store: SoilReportStore,
    filters: query.SoilReportFilters | None = None,
    pagination: query.Pagination | None = None,
    sort: query.SortSpec | None = None,
) -> query.Page:
    return await query.run_query(store, filters, pagination, sort)


async def create(store: SoilReportStore, payload: Mapping[str, Any]) -> dict[str, Any]:
    result = validation.validate_create(payload)
    if not result.is_valid:
        raise ValidationError(result.violations)

    record = {"id": new_report_id(), **validation.normalize_payload(payload)}
    created = await store.insert(record)
    logger.info(
        "soil_report_created id=%s state=%s district=%s village=%s",
        created["id"],
        created["state"],
        created["district"],
        created["village"],
    )
    return created


async def update(store: SoilReportStore, report_id: str, payload: Mapping[str, Any]) -> dict[str, Any]:
    await get_by_id(store, report_id)

    result = validation.validate_update(payload)
    if not result.is_valid:
        raise ValidationError(result.violations)

    fields = validation.normalize_payload(payload)
    updated = await store.update(report_id, fields)
    if updated is None:
        # Deleted between the existence check and the write.
        raise NotFoundError(report_id)
    logger.info("soil_report_updated id=%s fields=%s", report_id, ",".join(sorted(fields)))
    return updated


async def delete(store: SoilReportStore, report_id: str) -> None:
    await get_by_id(store, report_id)
    if not await store.delete(report_id):
        raise NotFoundError(report_id)
    logger.info("soil_report_deleted id=%s", report_id)
