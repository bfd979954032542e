"""Prometheus metrics for trip operations."""

from prometheus_client import Counter, Histogram

# Trip operation metrics
trip_operations_total = Counter(
    "trip_operations_total",
    "Total trip service operations",
    ["operation", "outcome"],
)

trip_operation_latency_ms = Histogram(
    "trip_operation_latency_ms",
    "Trip service operation latency in milliseconds",
    ["operation"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000, 2000, 4000],
)

location_lookup_latency_ms = Histogram(
    "location_lookup_latency_ms",
    "Location provider lookup latency in milliseconds",
    ["outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)


plan_generation_latency_ms = Histogram(
    "plan_generation_latency_ms",
    "Trip plan generator latency in milliseconds",
    ["outcome"],
    buckets=[100, 500, 1000, 2500, 5000, 10000, 20000, 30000, 60000],
)

class PrometheusTripMetrics:
    """Prometheus-based trip metrics implementation."""

    def record_operation(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Count an operation and record its latency."""
        trip_operations_total.labels(operation=operation, outcome=outcome).inc()
        trip_operation_latency_ms.labels(operation=operation).observe(latency_ms)

    def record_location_lookup(self, outcome: str, latency_ms: float) -> None:
        """Record location provider latency."""
        location_lookup_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def record_generation(self, outcome: str, latency_ms: float) -> None:
        """Record trip plan generator latency."""
        plan_generation_latency_ms.labels(outcome=outcome).observe(latency_ms)
