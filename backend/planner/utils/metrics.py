"""Prometheus metrics for cache-synced resources."""

from prometheus_client import Counter, Histogram

sync_latency_ms = Histogram(
    "sync_latency_ms",
    "Remote store call latency in milliseconds",
    ["resource", "operation", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

sync_errors_total = Counter(
    "sync_errors_total",
    "Total failed remote store calls",
    ["resource", "operation"],
)

cache_hits_total = Counter(
    "cache_hits_total",
    "Total reads served from the local cache",
    ["resource"],
)


class PrometheusSyncMetrics:
    """Prometheus-based sync metrics implementation."""

    def record_latency(self, resource: str, operation: str, outcome: str, latency_ms: float) -> None:
        sync_latency_ms.labels(resource=resource, operation=operation, outcome=outcome).observe(
            latency_ms
        )

    def inc_error(self, resource: str, operation: str) -> None:
        sync_errors_total.labels(resource=resource, operation=operation).inc()

    def inc_cache_hit(self, resource: str) -> None:
        cache_hits_total.labels(resource=resource).inc()
