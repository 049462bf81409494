"""
MindShield Call Protection API.

Serves scam analysis of call transcripts, the stored call history and flagged
numbers. When the recording watcher is enabled, new recordings in the
configured folder go through the processing pipeline in the background.
"""

import time
import uuid

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from mindshield.api.dependencies import get_pipeline
from mindshield.api.routes import analysis, calls, flagged_numbers, health, recordings
from mindshield.core.logging import setup_logging, get_logger
from mindshield.core.metrics import setup_metrics, MetricsCollector
from mindshield.database.connection import create_tables
from mindshield.database.types import utcnow
from mindshield.services.file_watcher import RecordingWatcher

setup_logging(settings.log_level, json_output=not settings.is_development())
logger = get_logger(__name__)
setup_metrics()

# Polled every few seconds by monitoring; not worth a log line each.
QUIET_PATHS = frozenset({"/health", "/metrics"})

_show_docs = settings.is_development()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Scam detection for recorded phone calls: keyword pre-filter, semantic risk classification and alerts",
    docs_url="/docs" if _show_docs else None,
    redoc_url="/redoc" if _show_docs else None,
    openapi_url="/openapi.json" if _show_docs else None,
)
app.state.watcher = None


def _error_body(message, **extra) -> dict:
    return {"status": "error", "message": message, **extra}


@app.middleware("http")
async def observe_requests(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.correlation_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed = time.perf_counter() - started
    route = request.scope.get("route")
    endpoint = route.path if route else request.url.path
    MetricsCollector.record_request(request.method, endpoint, response.status_code, elapsed)

    if request.url.path not in QUIET_PATHS:
        logger.info(
            f"{request.method} {endpoint} -> {response.status_code}",
            extra={
                "correlation_id": request_id,
                "status_code": response.status_code,
                "duration_ms": round(elapsed * 1000, 2),
                "client_ip": request.client.host if request.client else None,
            }
        )

    response.headers["X-Correlation-ID"] = request_id
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_body("Invalid request schema", details=exc.errors()),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """The call store is down or rejected a write; clients may retry later."""
    logger.error(
        f"Database error while serving {request.method} {request.url.path}: {exc}",
        extra={"correlation_id": getattr(request.state, "correlation_id", None)},
    )
    return JSONResponse(status_code=503, content=_error_body("Call database unavailable"))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid.uuid4())
    logger.error(
        f"Unhandled {type(exc).__name__} while serving {request.method} {request.url.path}",
        extra={"correlation_id": correlation_id},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(
            "Internal server error",
            correlation_id=correlation_id,
            timestamp=utcnow().isoformat(),
        ),
        headers={"X-Correlation-ID": correlation_id},
    )


@app.get("/")
async def root():
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "watcher": "running" if app.state.watcher is not None else "disabled",
        "endpoints": {
            "health": "GET /health",
            "analysis": "POST /api/analysis (header: x-api-key)",
            "calls": "GET /api/calls (header: x-api-key)",
            "recordings": "POST /api/recordings (header: x-api-key)",
            "flagged_numbers": "GET /api/flagged-numbers (header: x-api-key)",
        },
    }


app.include_router(health.router, tags=["Health"])
for module, tag in (
    (analysis, "Analysis"),
    (calls, "Calls"),
    (recordings, "Recordings"),
    (flagged_numbers, "Flagged Numbers"),
):
    app.include_router(module.router, prefix="/api", tags=[tag])


@app.on_event("startup")
async def startup_event():
    logger.info(
        "MindShield starting",
        extra={
            "version": settings.app_version,
            "environment": settings.environment,
            "watcher_enabled": settings.watcher.enabled,
            "classifier_configured": bool(settings.classifier.api_key),
        }
    )

    try:
        create_tables()
    except SQLAlchemyError as e:
        logger.error(f"Could not create call record tables: {e}")

    if not settings.watcher.enabled:
        return

    watcher = RecordingWatcher(callback=get_pipeline().process_recording)
    try:
        await watcher.start()
    except OSError as e:
        logger.error(f"Recording watcher did not start: {e}")
        return
    app.state.watcher = watcher


@app.on_event("shutdown")
async def shutdown_event():
    watcher, app.state.watcher = app.state.watcher, None
    if watcher is not None:
        await watcher.stop()
    logger.info("MindShield stopped")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mindshield.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
    )
