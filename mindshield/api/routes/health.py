"""
Unauthenticated monitoring endpoints: ``/health`` and ``/metrics``.
"""

import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel

from config.settings import settings
from mindshield.core.metrics import get_metrics_response, MetricsCollector
from mindshield.database.connection import check_database_health
from mindshield.database.types import utcnow

router = APIRouter()

STARTED_AT = time.time()


class HealthResponse(BaseModel):
    status: str  # healthy | degraded | unhealthy
    timestamp: datetime
    version: str
    components: Dict[str, str]
    metrics: Dict[str, Any]


def watcher_status(request: Request) -> str:
    watcher = getattr(request.app.state, "watcher", None)
    if watcher is None:
        return "disabled"
    return "healthy" if watcher.is_running else "unhealthy"


def overall_status(components: Dict[str, str]) -> str:
    """
    A dead database makes the service unusable. Without a classifier key,
    calls are still scored from keywords alone, so that only degrades it,
    as does a stopped watcher.
    """
    if components["database"] != "healthy":
        return "unhealthy"
    if components["classifier"] != "healthy" or components["watcher"] == "unhealthy":
        return "degraded"
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    database_ok = check_database_health()
    classifier_ok = bool(settings.classifier.api_key)

    MetricsCollector.update_system_health("database", database_ok)
    MetricsCollector.update_system_health("classifier", classifier_ok)

    components = {
        "database": "healthy" if database_ok else "unhealthy",
        "classifier": "healthy" if classifier_ok else "unconfigured",
        "watcher": watcher_status(request),
    }

    return HealthResponse(
        status=overall_status(components),
        timestamp=utcnow(),
        version=settings.app_version,
        components=components,
        metrics={"uptime": int(time.time() - STARTED_AT)},
    )


@router.get("/metrics")
async def metrics():
    return get_metrics_response()
