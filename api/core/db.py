"""
Async database access helpers (raw SQL) using asyncpg.

A `Database` owns one connection pool. The FastAPI lifespan opens it on
startup and closes it on shutdown (see `api/main.py`); feature stores receive
the instance explicitly instead of reaching for a module-level pool.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings


# Connectivity and driver failures surface as one opaque error type.
class StoreError(RuntimeError):
    pass


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(self, dsn: str | None = None) -> None:
        self._dsn = dsn
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn or database_url(),
                min_size=settings.db_pool_min_size(),
                max_size=settings.db_pool_max_size(),
                command_timeout=settings.db_command_timeout(),
            )
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(f"Failed to open database pool: {exc}") from exc

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise StoreError("DB pool is not initialized. Call connect() on startup.")
        return self._pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self.pool().fetchrow(sql, *args)
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(str(exc)) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            rows = await self.pool().fetch(sql, *args)
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(str(exc)) from exc
        return [_record_to_dict(r) for r in rows]

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        try:
            return await self.pool().fetchval(sql, *args)
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(str(exc)) from exc

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag,
        e.g. "DELETE 1".
        """
        try:
            return await self.pool().execute(sql, *args)
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(str(exc)) from exc
