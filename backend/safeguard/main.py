# safeguard/main.py
# ------------------------------------------------------------
# FastAPI entrypoint for the SafeGuard emergency-alert backend.
#
# Responsibilities:
# - App initialization & middleware
# - Error mapping (validation / not found / storage)
# - Route registration
# - Background retention sweep
# ------------------------------------------------------------

from contextlib import asynccontextmanager
import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .errors import ServiceError
from .kv_store import get_kv_store
from .middleware import RequestLoggingMiddleware
from .repository import AlertRepository
from .routes import alerts, health


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Retention sweep
# ------------------------------------------------------------
def sweep_once() -> int:
    """
    One retention pass against the configured store.
    """
    repo = AlertRepository(get_kv_store())
    return repo.cleanup(settings.alert_retention_days)


async def retention_loop(interval_sec: int) -> None:
    """
    Run sweep_once() every `interval_sec` seconds, first run after one
    interval. A failed pass is logged and the loop keeps going.
    """
    while True:
        await asyncio.sleep(max(1, interval_sec))
        try:
            await asyncio.to_thread(sweep_once)
        except Exception:
            logger.exception("Retention sweep failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    if settings.cleanup_enabled:
        task = asyncio.create_task(retention_loop(settings.cleanup_interval_sec))
        logger.info(
            "Retention sweep every %ds (%d day window)",
            settings.cleanup_interval_sec, settings.alert_retention_days,
        )

    yield

    if task:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


# ------------------------------------------------------------
# FastAPI application instance
# ------------------------------------------------------------
app = FastAPI(
    title="SafeGuard Alert API",
    version="0.1.0",
    description="Emergency alert relay between elderly users and their family",
    lifespan=lifespan,
)


# ------------------------------------------------------------
# Middleware
# ------------------------------------------------------------
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Length"],
    max_age=600,
)


# ------------------------------------------------------------
# Error mapping
# ------------------------------------------------------------
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code < 500:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed or wrongly typed bodies are caller errors: 400, not 422
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    logger.info("%s %s -> 400: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "details": str(exc)},
    )


# ------------------------------------------------------------
# API routes
# ------------------------------------------------------------
app.include_router(health.router)
app.include_router(alerts.router)
