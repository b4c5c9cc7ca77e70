"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'shuttle_booking_attempts_total',
    'Per-date booking attempts',
    ['outcome']  # created, duplicate, failed, full
)

booking_batch_latency = Histogram(
    'shuttle_booking_batch_latency_seconds',
    'Latency of a multi-date booking request',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Lifecycle metrics
status_transitions = Counter(
    'shuttle_status_transitions_total',
    'Booking status transitions written',
    ['status']
)

checkin_scans = Counter(
    'shuttle_checkin_scans_total',
    'QR check-in scans',
    ['result']  # checked_in, already_terminal, not_found
)

# Storage and cache
store_failures = Counter(
    'shuttle_store_failures_total',
    'Data-access calls that degraded to a default',
    ['operation']
)

cache_operations = Counter(
    'shuttle_cache_operations_total',
    'Route catalog cache operations',
    ['operation', 'result']
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(outcome: str):
    booking_attempts.labels(outcome=outcome).inc()


def record_transition(status: str):
    status_transitions.labels(status=status).inc()


def record_scan(result: str):
    checkin_scans.labels(result=result).inc()


def record_store_failure(operation: str):
    store_failures.labels(operation=operation).inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
