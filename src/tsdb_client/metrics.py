"""
Prometheus metrics for the client. Registered in the global REGISTRY on import.
"""

from prometheus_client import Counter, Gauge, Histogram

REQUESTS_TOTAL = Counter(
    "tsdb_client_requests_total",
    "HTTP requests issued, by method and outcome",
    ["method", "outcome"],
)

REQUEST_LATENCY = Histogram(
    "tsdb_client_request_latency_seconds",
    "Latency of a single HTTP attempt against one host",
    ["method"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

RETRIES_TOTAL = Counter(
    "tsdb_client_retries_total",
    "Connection-level failures followed by a backoff and retry",
    ["host"],
)

QUEUE_DEPTH = Gauge(
    "tsdb_client_queue_depth",
    "Entries waiting in the async write queue",
)

QUEUE_DROPPED_TOTAL = Counter(
    "tsdb_client_queue_dropped_total",
    "Entries evicted from a full async write queue",
)

WORKER_FLUSHES_TOTAL = Counter(
    "tsdb_client_worker_flushes_total",
    "Async worker flushes, by status",
    ["status"],
)
