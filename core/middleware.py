"""
FastAPI middleware for observability.

This module provides:
- Request/Response logging with request_id propagation
- Request timing for latency tracking
- In-memory metrics collection, including alert dispatch counters

Middleware Stack Order (in main.py):
    1. LoggingMiddleware (outermost - captures everything)
    2. CORS Middleware
    3. Application routes
"""

import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import set_request_id, clear_request_id
from models.outcome import DeliveryStatus

logger = logging.getLogger(__name__)


# =============================================================================
# IN-MEMORY METRICS COLLECTOR
# =============================================================================
# Fixed-size deques keep memory bounded. Exposed via the /metrics endpoint.

@dataclass
class RequestMetrics:
    """Container for a single request's metrics."""
    timestamp: datetime
    method: str
    path: str
    status_code: int
    duration_ms: float
    request_id: str


@dataclass
class MetricsCollector:
    """
    In-memory metrics collector with a fixed-size request buffer.

    Besides HTTP counters it tracks what the alert dispatcher did, so a
    dashboard can show relay failures without reading the alert history.
    """
    max_history: int = 1000

    _requests: Deque[RequestMetrics] = field(default_factory=lambda: deque(maxlen=1000))

    total_requests: int = 0
    total_2xx: int = 0
    total_4xx: int = 0
    total_5xx: int = 0

    # Alert dispatch counters (updated by the readings router)
    alerts_sent: int = 0
    alerts_failed: int = 0
    alerts_contacts_missing: int = 0
    alerts_disabled: int = 0
    notifications_failed: int = 0

    def record_request(self, metrics: RequestMetrics) -> None:
        """Record a completed request's metrics."""
        self._requests.append(metrics)
        self.total_requests += 1

        if 200 <= metrics.status_code < 300:
            self.total_2xx += 1
        elif 400 <= metrics.status_code < 500:
            self.total_4xx += 1
        elif 500 <= metrics.status_code < 600:
            self.total_5xx += 1

    def record_dispatch(self, outcome: "DispatchOutcome") -> None:
        """Record the result of one alert dispatch."""
        if outcome.contacts_missing:
            self.alerts_contacts_missing += 1
            return
        if outcome.delivery is not None:
            if outcome.delivery.status is DeliveryStatus.DISABLED:
                self.alerts_disabled += 1
            elif outcome.delivery.ok:
                self.alerts_sent += 1
            else:
                self.alerts_failed += 1
        if outcome.notification is not None and not outcome.notification.ok:
            self.notifications_failed += 1

    def get_latency_percentiles(self) -> Dict[str, float]:
        """
        Calculate p50, p95, p99 latencies in milliseconds from recent requests.

        Returns 0 for each if no data is available.
        """
        if not self._requests:
            return {"p50": 0, "p95": 0, "p99": 0}

        durations = sorted(r.duration_ms for r in self._requests)
        n = len(durations)

        def percentile(p: float) -> float:
            idx = int(n * p / 100)
            return durations[min(idx, n - 1)]

        return {
            "p50": round(percentile(50), 2),
            "p95": round(percentile(95), 2),
            "p99": round(percentile(99), 2),
        }

    def get_summary(self) -> Dict:
        """Get metrics summary for the /metrics endpoints."""
        latencies = self.get_latency_percentiles()

        return {
            "http_requests_total": self.total_requests,
            "http_requests_2xx_total": self.total_2xx,
            "http_requests_4xx_total": self.total_4xx,
            "http_requests_5xx_total": self.total_5xx,
            "http_request_duration_ms_p50": latencies["p50"],
            "http_request_duration_ms_p95": latencies["p95"],
            "http_request_duration_ms_p99": latencies["p99"],
            "alerts_sent_total": self.alerts_sent,
            "alerts_failed_total": self.alerts_failed,
            "alerts_contacts_missing_total": self.alerts_contacts_missing,
            "alerts_disabled_total": self.alerts_disabled,
            "notifications_failed_total": self.notifications_failed,
        }

    def get_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format."""
        summary = self.get_summary()
        lines = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
            f'http_requests_total {summary["http_requests_total"]}',
            "",
            "# HELP http_requests_by_status HTTP requests by status category",
            "# TYPE http_requests_by_status counter",
            f'http_requests_by_status{{status="2xx"}} {summary["http_requests_2xx_total"]}',
            f'http_requests_by_status{{status="4xx"}} {summary["http_requests_4xx_total"]}',
            f'http_requests_by_status{{status="5xx"}} {summary["http_requests_5xx_total"]}',
            "",
            "# HELP http_request_duration_ms Request duration in milliseconds",
            "# TYPE http_request_duration_ms gauge",
            f'http_request_duration_ms{{quantile="0.5"}} {summary["http_request_duration_ms_p50"]}',
            f'http_request_duration_ms{{quantile="0.95"}} {summary["http_request_duration_ms_p95"]}',
            f'http_request_duration_ms{{quantile="0.99"}} {summary["http_request_duration_ms_p99"]}',
            "",
            "# HELP vital_alerts_total Emergency alert emails by result",
            "# TYPE vital_alerts_total counter",
            f'vital_alerts_total{{result="sent"}} {summary["alerts_sent_total"]}',
            f'vital_alerts_total{{result="failed"}} {summary["alerts_failed_total"]}',
            f'vital_alerts_total{{result="contacts_missing"}} {summary["alerts_contacts_missing_total"]}',
            f'vital_alerts_total{{result="disabled"}} {summary["alerts_disabled_total"]}',
            "",
            "# HELP vital_notifications_failed_total Local notifications that could not be queued",
            "# TYPE vital_notifications_failed_total counter",
            f'vital_notifications_failed_total {summary["notifications_failed_total"]}',
        ]
        return "\n".join(lines) + "\n"


metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return metrics_collector


# =============================================================================
# LOGGING MIDDLEWARE
# =============================================================================

class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/Response logging middleware with request_id propagation.

    - Generates a short request_id per request (or reuses an incoming X-Request-ID)
    - Logs request start and completion
    - Records latency metrics
    - Adds X-Request-ID to responses
    """

    EXCLUDED_PATHS = {"/health", "/ready", "/metrics", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        set_request_id(request_id)

        method = request.method
        path = request.url.path
        start_time = time.perf_counter()

        if path not in self.EXCLUDED_PATHS:
            logger.info(
                "Request started",
                extra={
                    "method": method,
                    "path": path,
                    "query": str(request.query_params) if request.query_params else None,
                }
            )

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            logger.exception(
                "Request failed with exception",
                extra={"method": method, "path": path, "error": str(e)}
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            clear_request_id()

        metrics_collector.record_request(RequestMetrics(
            timestamp=datetime.now(timezone.utc),
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
            request_id=request_id,
        ))

        if path not in self.EXCLUDED_PATHS:
            log_level = logging.WARNING if status_code >= 400 else logging.INFO
            logger.log(
                log_level,
                "Request completed",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                    "request_id": request_id,
                }
            )

        response.headers["X-Request-ID"] = request_id
        return response
