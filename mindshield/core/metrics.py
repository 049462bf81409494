"""
Prometheus metrics for the MindShield service.

All metric names carry the ``mindshield_`` prefix.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

NAMESPACE = "mindshield"

HEALTH_COMPONENTS = ("database", "classifier", "watcher")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests served",
    ["method", "endpoint", "status"],
    namespace=NAMESPACE,
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Time spent serving HTTP requests",
    ["endpoint"],
    namespace=NAMESPACE,
)

SCAM_ANALYSIS_COUNT = Counter(
    "scam_analysis_total",
    "Transcripts analysed, by resulting risk level and by whether the classifier contributed",
    ["risk_level", "mode"],
    namespace=NAMESPACE,
)

CLASSIFIER_CALLS = Counter(
    "classifier_calls_total",
    "Risk classifier calls by outcome",
    ["model", "status"],
    namespace=NAMESPACE,
)

CLASSIFIER_DURATION = Histogram(
    "classifier_call_duration_seconds",
    "Risk classifier latency",
    ["model"],
    namespace=NAMESPACE,
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, 30, 60),
)

TRANSCRIPTION_COUNT = Counter(
    "transcription_total",
    "Speech-to-text requests by outcome",
    ["status"],
    namespace=NAMESPACE,
)

RECORDINGS_PROCESSED = Counter(
    "recordings_processed_total",
    "Recordings taken through the processing pipeline",
    ["status"],
    namespace=NAMESPACE,
)

ALERTS_SENT = Counter(
    "alerts_sent_total",
    "Scam and known-scammer alerts by delivery outcome",
    ["alert_type", "status"],
    namespace=NAMESPACE,
)

DATABASE_OPERATIONS = Counter(
    "database_operations_total",
    "Call record store operations",
    ["operation", "table", "status"],
    namespace=NAMESPACE,
)

SYSTEM_HEALTH = Gauge(
    "component_healthy",
    "1 when the component is healthy, 0 otherwise",
    ["component"],
    namespace=NAMESPACE,
)


def setup_metrics() -> None:
    """Expose every health component from startup, initially unhealthy."""
    for component in HEALTH_COMPONENTS:
        SYSTEM_HEALTH.labels(component=component).set(0)


def get_metrics_response() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


class MetricsCollector:
    """Static helpers so callers never touch metric objects directly."""

    @staticmethod
    def record_request(method: str, endpoint: str, status: int, duration: float):
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
        REQUEST_DURATION.labels(endpoint=endpoint).observe(duration)

    @staticmethod
    def record_scam_analysis(risk_level: str, degraded: bool):
        mode = "keyword_only" if degraded else "combined"
        SCAM_ANALYSIS_COUNT.labels(risk_level=risk_level, mode=mode).inc()

    @staticmethod
    def record_classifier_call(model: str, status: str, duration: float):
        CLASSIFIER_CALLS.labels(model=model, status=status).inc()
        CLASSIFIER_DURATION.labels(model=model).observe(duration)

    @staticmethod
    def record_transcription(status: str):
        TRANSCRIPTION_COUNT.labels(status=status).inc()

    @staticmethod
    def record_recording_processed(status: str):
        """``status`` is one of completed, failed or skipped."""
        RECORDINGS_PROCESSED.labels(status=status).inc()

    @staticmethod
    def record_alert(alert_type: str, status: str):
        ALERTS_SENT.labels(alert_type=alert_type, status=status).inc()

    @staticmethod
    def record_database_operation(operation: str, table: str, status: str):
        DATABASE_OPERATIONS.labels(operation=operation, table=table, status=status).inc()

    @staticmethod
    def update_system_health(component: str, is_healthy: bool):
        SYSTEM_HEALTH.labels(component=component).set(1 if is_healthy else 0)
