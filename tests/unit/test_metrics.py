"""Tests for Prometheus metrics."""

from __future__ import annotations

from prometheus_client import REGISTRY

from tls_rotator.metrics import (
    api_call_duration_seconds,
    api_call_total,
    error_total,
    reconcile_duration_seconds,
    reconcile_total,
    rotations_total,
)


class TestMetricsExist:
    """Test that all expected metrics are defined."""

    def test_reconcile_total_exists(self):
        """Test reconcile_total counter exists."""
        # Prometheus counters don't include "_total" in their _name attribute
        assert reconcile_total._name == "tls_rotator_reconcile"

    def test_reconcile_duration_exists(self):
        """Test reconcile_duration_seconds histogram exists."""
        assert reconcile_duration_seconds._name == "tls_rotator_reconcile_duration_seconds"

    def test_rotations_total_exists(self):
        """Test rotations_total counter exists."""
        assert rotations_total._name == "tls_rotator_rotations"

    def test_error_total_exists(self):
        """Test error_total counter exists."""
        assert error_total._name == "tls_rotator_error"

    def test_api_call_metrics_exist(self):
        """Test API call metrics exist."""
        assert api_call_total._name == "tls_rotator_api_call"
        assert api_call_duration_seconds._name == "tls_rotator_api_call_duration_seconds"


class TestMetricsRecording:
    """Test that metrics record values."""

    def test_rotations_total_increments(self):
        """Test incrementing the transition counter."""
        labels = {"transition": "rotated"}
        before = REGISTRY.get_sample_value("tls_rotator_rotations_total", labels) or 0.0

        rotations_total.labels(**labels).inc()

        assert REGISTRY.get_sample_value("tls_rotator_rotations_total", labels) == before + 1

    def test_api_call_total_labels(self):
        """Test that API calls are labelled by operation and result."""
        labels = {"operation": "update", "result": "409"}
        before = REGISTRY.get_sample_value("tls_rotator_api_call_total", labels) or 0.0

        api_call_total.labels(**labels).inc()

        assert REGISTRY.get_sample_value("tls_rotator_api_call_total", labels) == before + 1

    def test_reconcile_duration_observes(self):
        """Test observing a reconciliation duration."""
        labels = {"kind": "Secret"}
        before = REGISTRY.get_sample_value("tls_rotator_reconcile_duration_seconds_count", labels) or 0.0

        reconcile_duration_seconds.labels(**labels).observe(0.2)

        after = REGISTRY.get_sample_value("tls_rotator_reconcile_duration_seconds_count", labels)
        assert after == before + 1
