"""
Record store contract.

Stores own persisted soil reports and hand out plain dict copies. Two
implementations ship: `repository.PostgresSoilReportStore` and
`memory.MemorySoilReportStore`.
"""

from __future__ import annotations

from typing import Any, Protocol

from .query import QueryPlan


class SoilReportStore(Protocol):
    async def find(self, plan: QueryPlan) -> tuple[list[dict[str, Any]], int]: ...

    async def get_by_id(self, report_id: str) -> dict[str, Any] | None: ...

    async def insert(self, record: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, report_id: str, fields: dict[str, Any]) -> dict[str, Any] | None: ...

    async def delete(self, report_id: str) -> bool: ...

    async def clear(self) -> int: ...

    async def ping(self) -> None: ...
