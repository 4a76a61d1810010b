"""
Health, readiness, and metrics endpoints for operational visibility.

This module provides:
- /health: Liveness probe (is the app running?)
- /ready: Readiness probe (is the database available?)
- /metrics: Prometheus-compatible metrics, including alert dispatch counters
"""
import logging
import time
from datetime import datetime, timezone
from typing import Dict, Any, List

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from core.config import settings
from core.dependencies import get_database
from core.middleware import get_metrics_collector
from core.vital_registry import list_vitals
from repositories.base import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])

API_VERSION = "1.0.0"


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str  # "ok", "unavailable"
    latency_ms: float | None = None
    message: str | None = None


class ReadyResponse(BaseModel):
    """Response model for /ready endpoint."""
    status: str  # "ready", "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


class MetricsResponse(BaseModel):
    """Response model for JSON metrics endpoint."""
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float
    alerts_sent_total: int
    alerts_failed_total: int
    alerts_contacts_missing_total: int
    alerts_disabled_total: int
    notifications_failed_total: int


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# HEALTH ENDPOINT (LIVENESS)
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Check if the application is running. Returns immediately without checking dependencies."
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=API_VERSION, timestamp=_utc_timestamp())


# =============================================================================
# READINESS ENDPOINT
# =============================================================================

async def _check_database(db: Database) -> DependencyStatus:
    """Run a trivial query against SQLite."""
    start = time.perf_counter()
    try:
        conn = db.get_connection()
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()

        latency_ms = (time.perf_counter() - start) * 1000
        return DependencyStatus(
            name="database",
            status="ok",
            latency_ms=round(latency_ms, 2),
            message="SQLite connection healthy"
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.error("Database health check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="database",
            status="unavailable",
            latency_ms=round(latency_ms, 2),
            message=f"Connection failed: {type(e).__name__}"
        )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Check if the application is ready to serve requests. Returns 503 if the database is unavailable."
)
async def readiness_check(response: Response, db: Database = Depends(get_database)) -> ReadyResponse:
    """
    Readiness probe.

    The email relay is not probed; delivery failures are reported per reading.
    """
    db_status = await _check_database(db)
    dependencies = [db_status]

    if db_status.status == "unavailable":
        status = "not_ready"
        response.status_code = 503
    else:
        status = "ready"

    return ReadyResponse(status=status, dependencies=dependencies, timestamp=_utc_timestamp())


# =============================================================================
# METRICS ENDPOINTS
# =============================================================================

@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Export metrics in Prometheus text format. "
                "Includes HTTP request counts, latency percentiles, and alert dispatch counters."
)
async def get_metrics() -> Response:
    collector = get_metrics_collector()
    return Response(
        content=collector.get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get(
    "/metrics/json",
    response_model=MetricsResponse,
    summary="JSON metrics",
    description="Export metrics in JSON format."
)
async def get_metrics_json() -> MetricsResponse:
    return MetricsResponse(**get_metrics_collector().get_summary())


@router.get("/", summary="API root", description="Root endpoint with basic API information.")
async def root() -> Dict[str, Any]:
    return {
        "service": f"{settings.vitals_svc_app_name} Vital Alerts API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "metrics": "/metrics",
        "vitals": [
            {"kind": v.kind, "display_name": v.display_name, "unit": v.unit}
            for v in list_vitals()
        ]
    }
