from .metrics import (
    Counter,
    Histogram,
    reset_all,
    ttlstore_backend_errors_total,
    ttlstore_request_latency_seconds,
    ttlstore_requests_total,
    ttlstore_sweep_removed_total,
)

__all__ = [
    "Counter",
    "Histogram",
    "reset_all",
    "ttlstore_backend_errors_total",
    "ttlstore_request_latency_seconds",
    "ttlstore_requests_total",
    "ttlstore_sweep_removed_total",
]
