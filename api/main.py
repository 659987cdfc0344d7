from __future__ import annotations

import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import psutil
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import settings
from core.db import Database, StoreError
from core.logging_config import configure_logging
from soil_reports.errors import SoilReportError
from soil_reports.memory import MemorySoilReportStore
from soil_reports.repository import PostgresSoilReportStore
from soil_reports.router import router as soil_reports_router
from soil_reports.store import SoilReportStore

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


def _error_body(kind: str, message: str, errors: list[dict] | None = None) -> dict:
    error: dict = {"kind": kind, "message": message}
    if errors:
        error["errors"] = errors
    return {"success": False, "error": error}


def _memory_usage() -> dict:
    used = psutil.Process(os.getpid()).memory_info().rss / (1024 * 1024)
    total = psutil.virtual_memory().total / (1024 * 1024)
    return {
        "used": round(used, 2),
        "total": round(total, 2),
        "percentUsed": round(used / total * 100, 2) if total else 0.0,
    }


def _request_validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append(
            {
                "field": ".".join(loc) or None,
                "kind": str(item.get("type") or "invalid"),
                "message": str(item.get("msg") or "Invalid value"),
            }
        )
    return errors


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SoilReportError)
    async def soil_report_error_handler(request: Request, exc: SoilReportError) -> JSONResponse:
        logger.info("request_rejected path=%s kind=%s message=%s", request.url.path, exc.kind, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.kind, exc.message, [v.to_dict() for v in exc.violations]),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Invalid request", _request_validation_errors(exc)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = "unauthorized" if exc.status_code == 401 else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(kind, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("store_error path=%s error=%s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content=_error_body("store_unavailable", "Soil report store is unavailable"),
        )


async def _open_store(app: FastAPI) -> None:
    backend = settings.store_backend()
    if backend == "memory":
        app.state.soil_store = MemorySoilReportStore()
        logger.info("store_opened backend=memory")
        return

    if backend != "postgres":
        raise RuntimeError(f"Unknown SOIL_STORE_BACKEND: {backend}")

    database = Database()
    await database.connect()
    store = PostgresSoilReportStore(database)
    await store.ensure_schema()
    app.state.database = database
    app.state.soil_store = store
    logger.info("store_opened backend=postgres")


def create_app(store: SoilReportStore | None = None) -> FastAPI:
    """
    Build the API. Pass `store` to skip opening a database (tests, embedding).
    """
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = time.monotonic()
        if store is not None:
            app.state.soil_store = store
        else:
            await _open_store(app)
        try:
            yield
        finally:
            database = getattr(app.state, "database", None)
            if database is not None:
                await database.close()
                app.state.database = None

    app = FastAPI(title="Soil Health Reports API", version=settings.app_version(), lifespan=lifespan)

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit()],
        enabled=settings.rate_limit_enabled(),
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Allow the frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                "request_failed request_id=%s method=%s path=%s duration_ms=%.1f",
                request_id,
                request.method,
                request.url.path,
                duration_ms,
            )
            # Unhandled errors still get the request id and security headers.
            response = JSONResponse(
                status_code=500,
                content=_error_body("internal_error", "Internal Server Error"),
            )
        else:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "request_completed request_id=%s method=%s path=%s status=%s duration_ms=%.1f",
                request_id,
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
        response.headers["X-Request-ID"] = request_id
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        return response

    _register_error_handlers(app)
    app.include_router(soil_reports_router, tags=["soil-reports"])

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        started_at = getattr(request.app.state, "started_at", time.monotonic())
        soil_store = getattr(request.app.state, "soil_store", None)

        ping_started = time.perf_counter()
        healthy = soil_store is not None
        if soil_store is not None:
            try:
                await soil_store.ping()
            except StoreError as exc:
                logger.error("health_check_failed error=%s", exc)
                healthy = False
        latency_ms = round((time.perf_counter() - ping_started) * 1000, 2)

        body = {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - started_at, 3),
            "database": {
                "status": "connected" if healthy else "disconnected",
                "latency": latency_ms if healthy else -1,
            },
            "memory": _memory_usage(),
            "version": settings.app_version(),
        }
        return JSONResponse(status_code=200 if healthy else 503, content=body)

    @app.get("/")
    def root() -> dict:
        return {"message": "soil health reports api"}

    return app


app = create_app()
