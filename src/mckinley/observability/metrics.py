"""Prometheus metrics for outgoing API calls."""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

API_REQUEST_COUNT = Counter(
    "api_client_requests_total",
    "Total outgoing API calls",
    ["endpoint", "method", "outcome"],
)
API_REQUEST_LATENCY = Histogram(
    "api_client_request_duration_seconds",
    "Outgoing API call duration in seconds",
    ["endpoint", "method"],
)


@contextmanager
def track_latency(endpoint: str, method: str) -> Iterator[None]:
    """Observe the duration of the enclosed block."""
    start = time.perf_counter()
    try:
        yield
    finally:
        API_REQUEST_LATENCY.labels(endpoint=endpoint, method=method).observe(
            time.perf_counter() - start
        )


def record_outcome(endpoint: str, method: str, outcome: str) -> None:
    """Count one finished call; ``outcome`` is ``success`` or an error kind."""
    API_REQUEST_COUNT.labels(endpoint=endpoint, method=method, outcome=outcome).inc()
