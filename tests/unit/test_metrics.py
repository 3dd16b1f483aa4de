"""
Tests for client Prometheus metrics.
"""

from prometheus_client import CollectorRegistry

from documentdb.metrics import ClientMetrics


class TestClientMetrics:
    """Test suite for ClientMetrics."""

    def test_private_registries_do_not_collide(self):
        """Test that two collectors can coexist in one process."""
        first = ClientMetrics()
        second = ClientMetrics()
        assert first.registry is not second.registry

    def test_track_request(self):
        """Test request counters and duration histogram."""
        registry = CollectorRegistry()
        metrics = ClientMetrics(registry)

        metrics.track_request("read", "docs", 200, 0.02)
        metrics.track_request("read", "docs", 200, 0.03)
        metrics.track_request("read", "docs", 404, 0.01)

        assert registry.get_sample_value(
            "documentdb_requests_total",
            {"operation": "read", "resource_type": "docs", "status": "200"},
        ) == 2.0
        assert registry.get_sample_value(
            "documentdb_request_duration_seconds_count",
            {"operation": "read", "resource_type": "docs"},
        ) == 3.0

    def test_retry_error_and_page_counters(self):
        """Test the remaining counters."""
        registry = CollectorRegistry()
        metrics = ClientMetrics(registry)

        metrics.track_retry("docs", "RateLimited")
        metrics.track_error("create", "Conflict")
        metrics.track_page("colls")
        metrics.track_page("colls")

        assert registry.get_sample_value(
            "documentdb_retries_total", {"resource_type": "docs", "reason": "RateLimited"}
        ) == 1.0
        assert registry.get_sample_value(
            "documentdb_errors_total", {"operation": "create", "error_type": "Conflict"}
        ) == 1.0
        assert registry.get_sample_value("documentdb_feed_pages_total", {"resource_type": "colls"}) == 2.0

    def test_generate_metrics(self):
        """Test text exposition output."""
        metrics = ClientMetrics()
        metrics.track_page("dbs")

        output = metrics.generate_metrics().decode()
        assert "documentdb_feed_pages_total" in output
        assert metrics.get_content_type().startswith("text/plain")
