"""
In-process soil report store.

Used by the test suite and by `SOIL_STORE_BACKEND=memory` for local runs.
Nothing is persisted across restarts.
"""

from __future__ import annotations

from typing import Any

from .query import QueryPlan, sort_records


class MemorySoilReportStore:
    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        for record in records or []:
            self._records[str(record["id"])] = dict(record)

    def __len__(self) -> int:
        return len(self._records)

    async def find(self, plan: QueryPlan) -> tuple[list[dict[str, Any]], int]:
        matching = [r for r in self._records.values() if plan.filters.matches(r)]
        ordered = sort_records(matching, plan.sort)
        window = ordered[plan.offset : plan.offset + plan.limit]
        return [dict(r) for r in window], len(matching)

    async def get_by_id(self, report_id: str) -> dict[str, Any] | None:
        record = self._records.get(report_id)
        return dict(record) if record is not None else None

    async def insert(self, record: dict[str, Any]) -> dict[str, Any]:
        report_id = str(record["id"])
        if report_id in self._records:
            raise KeyError(f"Duplicate soil report id: {report_id}")
        self._records[report_id] = dict(record)
        return dict(record)

    async def update(self, report_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        record = self._records.get(report_id)
        if record is None:
            return None
        record.update(fields)
        return dict(record)

    async def delete(self, report_id: str) -> bool:
        return self._records.pop(report_id, None) is not None

    async def clear(self) -> int:
        count = len(self._records)
        self._records.clear()
        return count

    async def ping(self) -> None:
        return None
