"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Event creation metrics
event_creations = Counter(
    'event_creations_total',
    'Event creation attempts',
    ['status']  # created, duplicate, rejected, error
)

event_creation_latency = Histogram(
    'event_creation_latency_seconds',
    'Event creation latency including image processing',
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# Upload metrics
image_uploads = Counter(
    'image_uploads_total',
    'Image upload outcomes',
    ['result']  # stored, missing, too_large, not_image, unsupported, undecodable, write_failed
)

# Access guard metrics
auth_denials = Counter(
    'auth_denials_total',
    'Requests rejected by the access guard',
    ['reason']  # no_token, invalid_token, forbidden
)

# Database metrics
db_operations = Counter(
    'db_operations_total',
    'Total database operations',
    ['operation']  # read, write, rollback
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_event_creation(status: str):
    """Record event creation attempt. Status: created, duplicate, rejected, error"""
    event_creations.labels(status=status).inc()

def record_image_upload(result: str):
    image_uploads.labels(result=result).inc()

def record_auth_denial(reason: str):
    auth_denials.labels(reason=reason).inc()

def record_db_operation(operation: str):
    """Record database operation. Operation: read, write, rollback"""
    db_operations.labels(operation=operation).inc()
