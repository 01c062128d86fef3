"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from typing import Optional

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Registration metrics
registration_attempts = Counter(
    'registration_attempts_total',
    'Total registration attempts',
    ['flow', 'status']  # flow: guest, member; status: accepted, rejected, conflict, error
)

registration_latency = Histogram(
    'registration_latency_seconds',
    'Registration request latency',
    ['flow'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Admission control metrics
admission_decisions = Counter(
    'admission_decisions_total',
    'Admission decisions per rejection reason',
    ['result']  # accepted, capacity_exceeded, dine_in_mismatch, ...
)

capacity_conflicts = Counter(
    'capacity_conflict_retries_total',
    'Registration retries caused by concurrent seat claims on a session'
)

# Order adjustments
order_adjustments = Counter(
    'order_adjustments_total',
    'Administrative order adjustments',
    ['lines_replaced']  # yes, no
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_registration(flow: str, status: str):
    """Record registration attempt. Status: accepted, rejected, conflict, error"""
    registration_attempts.labels(flow=flow, status=status).inc()


def record_admission(result: str):
    """Record admission control decision."""
    admission_decisions.labels(result=result).inc()


def record_cache_operation(operation: str, hit: Optional[bool] = None):
    """Reads are labelled hit or miss; writes and deletes are labelled ok."""
    result = "ok" if hit is None else ("hit" if hit else "miss")
    cache_operations.labels(operation=operation, result=result).inc()
