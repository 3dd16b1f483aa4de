"""
Client Metrics Collection

Prometheus metrics for request outcomes, retries, latency and feed paging.

Author: documentdb-client contributors
Date: 2026-10-19
"""

from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


class ClientMetrics:
    """
    Prometheus metrics collector for client requests.

    Each instance owns a private registry unless one is supplied, so several
    clients can live in one process without duplicate registration.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collectors.

        Args:
            registry: Prometheus registry (a private one if None)
        """
        self.registry = registry if registry is not None else CollectorRegistry()

        self.requests_total = Counter(
            'documentdb_requests_total',
            'Total requests sent, by outcome',
            ['operation', 'resource_type', 'status'],
            registry=self.registry
        )

        self.retries_total = Counter(
            'documentdb_retries_total',
            'Total retried attempts',
            ['resource_type', 'reason'],
            registry=self.registry
        )

        self.errors_total = Counter(
            'documentdb_errors_total',
            'Total errors surfaced to callers',
            ['operation', 'error_type'],
            registry=self.registry
        )

        self.pages_fetched_total = Counter(
            'documentdb_feed_pages_total',
            'Total feed pages fetched',
            ['resource_type'],
            registry=self.registry
        )

        self.request_duration_seconds = Histogram(
            'documentdb_request_duration_seconds',
            'Duration of a single HTTP attempt',
            ['operation', 'resource_type'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
            registry=self.registry
        )

    def track_request(self, operation: str, resource_type: str, status: int, duration: float) -> None:
        """
        Track one HTTP attempt.

        Args:
            operation: Operation kind (create, read, query...)
            resource_type: Resource path keyword
            status: HTTP status (0 for transport failures)
            duration: Attempt duration in seconds
        """
        self.requests_total.labels(
            operation=operation, resource_type=resource_type, status=str(status)
        ).inc()
        self.request_duration_seconds.labels(
            operation=operation, resource_type=resource_type
        ).observe(duration)

    def track_retry(self, resource_type: str, reason: str) -> None:
        self.retries_total.labels(resource_type=resource_type, reason=reason).inc()

    def track_error(self, operation: str, error_type: str) -> None:
        self.errors_total.labels(operation=operation, error_type=error_type).inc()

    def track_page(self, resource_type: str) -> None:
        self.pages_fetched_total.labels(resource_type=resource_type).inc()

    def generate_metrics(self) -> bytes:
        """Metrics in Prometheus text format."""
        return generate_latest(self.registry)

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST
