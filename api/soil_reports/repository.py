"""
Soil report persistence (raw SQL).
This module is where soil-report SQL lives.
"""

from __future__ import annotations

from typing import Any

from core.db import Database

from .query import QueryPlan
from .validation import MUTABLE_FIELDS

COLUMNS = "id, state, district, village, ph, nitrogen, phosphorus, potassium"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS soil_reports (
  id text PRIMARY KEY,
  state varchar(100) NOT NULL,
  district varchar(100) NOT NULL,
  village varchar(100) NOT NULL,
  ph double precision NOT NULL CHECK (ph >= 0 AND ph <= 14),
  nitrogen double precision NOT NULL CHECK (nitrogen > 0),
  phosphorus double precision NOT NULL CHECK (phosphorus > 0),
  potassium double precision NOT NULL CHECK (potassium > 0)
);
CREATE INDEX IF NOT EXISTS soil_reports_location_idx
  ON soil_reports (state, district, village);
"""


def _row_to_report(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "state": str(row["state"]),
        "district": str(row["district"]),
        "village": str(row["village"]),
        "ph": float(row["ph"]),
        "nitrogen": float(row["nitrogen"]),
        "phosphorus": float(row["phosphorus"]),
        "potassium": float(row["potassium"]),
    }


def build_where(plan: QueryPlan) -> tuple[str, list[Any]]:
    """
    Translate plan filters into a parameterised WHERE clause.

    Column names come from fixed field tuples, never from request input.
    """
    clauses: list[str] = []
    args: list[Any] = []

    for name, expected in plan.filters.exact_matches().items():
        args.append(expected)
        clauses.append(f"{name} = ${len(args)}")

    for name, bounds in plan.filters.ranges().items():
        if bounds.min is not None:
            args.append(float(bounds.min))
            clauses.append(f"{name} >= ${len(args)}")
        if bounds.max is not None:
            args.append(float(bounds.max))
            clauses.append(f"{name} <= ${len(args)}")

    where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
    return where, args


def build_order_by(plan: QueryPlan) -> str:
    direction = "DESC" if plan.sort.descending else "ASC"
    if plan.sort.field == "id":
        return f"ORDER BY id {direction}"
    return f"ORDER BY {plan.sort.field} {direction}, id ASC"


class PostgresSoilReportStore:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def ensure_schema(self) -> None:
        await self._db.execute(SCHEMA_SQL)

    async def find(self, plan: QueryPlan) -> tuple[list[dict[str, Any]], int]:
        where, args = build_where(plan)
        total = int(await self._db.fetch_val(f"SELECT count(*) FROM soil_reports {where}", *args) or 0)
        if plan.offset >= total:
            return [], total

        limit_idx = len(args) + 1
        rows = await self._db.fetch_all(
            f"""
            SELECT {COLUMNS}
            FROM soil_reports
            {where}
            {build_order_by(plan)}
            LIMIT ${limit_idx}
            OFFSET ${limit_idx + 1}
            """,
            *args,
            # Bounded by the row count so oversized page numbers and limits stay within bigint.
            min(plan.limit, total - plan.offset),
            plan.offset,
        )
        return [_row_to_report(r) for r in rows], total

    async def get_by_id(self, report_id: str) -> dict[str, Any] | None:
        row = await self._db.fetch_one(
            f"""
            SELECT {COLUMNS}
            FROM soil_reports
            WHERE id = $1
            """,
            report_id,
        )
        return _row_to_report(row) if row is not None else None

    async def insert(self, record: dict[str, Any]) -> dict[str, Any]:
        row = await self._db.fetch_one(
            f"""
            INSERT INTO soil_reports ({COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {COLUMNS}
            """,
            record["id"],
            record["state"],
            record["district"],
            record["village"],
            record["ph"],
            record["nitrogen"],
            record["phosphorus"],
            record["potassium"],
        )
        if row is None:
            raise RuntimeError("Failed to insert soil report.")
        return _row_to_report(row)

    async def update(self, report_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        names = [name for name in MUTABLE_FIELDS if name in fields]
        if not names:
            return await self.get_by_id(report_id)

        assignments = ", ".join(f"{name} = ${idx}" for idx, name in enumerate(names, start=2))
        row = await self._db.fetch_one(
            f"""
            UPDATE soil_reports
            SET {assignments}
            WHERE id = $1
            RETURNING {COLUMNS}
            """,
            report_id,
            *(fields[name] for name in names),
        )
        return _row_to_report(row) if row is not None else None

    async def delete(self, report_id: str) -> bool:
        row = await self._db.fetch_one(
            """
            DELETE FROM soil_reports
            WHERE id = $1
            RETURNING id
            """,
            report_id,
        )
        return row is not None

    async def clear(self) -> int:
        status = await self._db.execute("DELETE FROM soil_reports")
        # asyncpg returns the command tag, e.g. "DELETE 10".
        return int(status.rsplit(" ", 1)[-1])

    async def ping(self) -> None:
        await self._db.fetch_val("SELECT 1")
