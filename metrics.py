# metrics.py - Prometheus Metrics for the edge scoring + grading engine
# Observability for grading batches, promotions, alerts and the scoring API

import time
import logging
from functools import wraps
from typing import Callable

from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST

from env_config import Config

logger = logging.getLogger("metrics")

# ============================================================================
# METRICS DEFINITIONS
# ============================================================================

# Request metrics
REQUEST_COUNT = Counter(
    'edge_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'edge_request_latency_seconds',
    'Request latency in seconds',
    ['method', 'endpoint'],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Grading metrics
PICKS_GRADED = Counter(
    'edge_picks_graded_total',
    'Records graded, by final tier',
    ['job', 'tier']
)

PROMOTIONS = Counter(
    'edge_promotions_total',
    'Records promoted into final_picks',
    ['job']
)

PROMOTION_ERRORS = Counter(
    'edge_promotion_errors_total',
    'Promotion inserts that failed (grade kept)',
    ['job']
)

ALERTS_RAISED = Counter(
    'edge_alerts_total',
    'Alerts written',
    ['type']
)

GRADING_ERRORS = Counter(
    'edge_grading_errors_total',
    'Records that failed grading or persistence',
    ['job']
)

BATCH_DURATION = Histogram(
    'edge_grading_batch_seconds',
    'Wall time of one grading batch',
    ['job'],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

APP_INFO = Info(
    'edge_app',
    'Application information'
)
APP_INFO.info({
    'api_version': Config.API_VERSION,
})


# ============================================================================
# METRIC HELPERS
# ============================================================================

def track_request(method: str, endpoint: str, status: int, duration: float):
    """Track an HTTP request."""
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)


def track_graded(job: str, tier: str):
    PICKS_GRADED.labels(job=job, tier=tier).inc()


def track_promotion(job: str, success: bool):
    if success:
        PROMOTIONS.labels(job=job).inc()
    else:
        PROMOTION_ERRORS.labels(job=job).inc()


def track_alert(alert_type: str):
    ALERTS_RAISED.labels(type=alert_type).inc()


def track_grading_error(job: str):
    GRADING_ERRORS.labels(job=job).inc()


def track_batch_duration(job: str, duration: float):
    BATCH_DURATION.labels(job=job).observe(duration)


# ============================================================================
# MIDDLEWARE
# ============================================================================

def metrics_middleware(func: Callable) -> Callable:
    """Decorator to track endpoint metrics."""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.time()
        status = 500
        try:
            result = await func(*args, **kwargs)
            status = 200
            return result
        finally:
            duration = time.time() - start_time
            track_request("POST", func.__name__, status, duration)
    return wrapper


# ============================================================================
# METRICS ENDPOINT
# ============================================================================

def get_metrics_response():
    """Generate Prometheus metrics response."""
    return generate_latest(), CONTENT_TYPE_LATEST
