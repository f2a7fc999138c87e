import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Gauge, Histogram

# Labels stay low-cardinality: operation names only, never object keys.
OPERATIONS = Counter(
    "swiftstore_backend_operations_total",
    "Total backend operations",
    ["operation", "outcome"],
)

LATENCY = Histogram(
    "swiftstore_backend_operation_duration_seconds",
    "Backend operation latency in seconds",
    ["operation"],
)

POOL_IN_USE = Gauge(
    "swiftstore_pool_slots_in_use",
    "Connection pool slots currently held by transfers",
)


@contextmanager
def observe_operation(operation: str, *, enabled: bool = True) -> Iterator[None]:
    """Count and time one backend operation; the outcome is the exception class name."""
    if not enabled:
        yield
        return
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except Exception as exc:
        outcome = type(exc).__name__
        raise
    finally:
        OPERATIONS.labels(operation=operation, outcome=outcome).inc()
        LATENCY.labels(operation=operation).observe(time.perf_counter() - start)
