"""Prometheus metrics for the TLS Rotator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "tls_rotator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "tls_rotator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Target transitions
rotations_total = Counter(
    "tls_rotator_rotations_total",
    "Total number of target secret transitions",
    ["transition"],
)

error_total = Counter(
    "tls_rotator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# API call metrics
api_call_total = Counter(
    "tls_rotator_api_call_total",
    "Total number of Kubernetes secret API calls",
    ["operation", "result"],
)

api_call_duration_seconds = Histogram(
    "tls_rotator_api_call_duration_seconds",
    "Duration of Kubernetes secret API calls in seconds",
    ["operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)
