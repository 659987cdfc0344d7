"""
Environment-driven settings.

Every setting is read at call time so tests can monkeypatch the environment
without reloading modules.
"""

from __future__ import annotations

import os

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def store_backend() -> str:
    return _env_str("SOIL_STORE_BACKEND", "postgres").lower()


def db_pool_min_size() -> int:
    return _env_int("DB_POOL_MIN_SIZE", 1)


def db_pool_max_size() -> int:
    return _env_int("DB_POOL_MAX_SIZE", 5)


def db_command_timeout() -> float:
    return _env_float("DB_COMMAND_TIMEOUT", 30.0)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def rate_limit() -> str:
    # 100 requests per client per 15 minutes.
    return _env_str("RATE_LIMIT", "100/15minutes")


def rate_limit_enabled() -> bool:
    return _env_bool("RATE_LIMIT_ENABLED", True)


def default_page_limit() -> int:
    return _env_int("SOIL_REPORTS_DEFAULT_LIMIT", 10)


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def app_version() -> str:
    return _env_str("APP_VERSION", "1.0.0")
