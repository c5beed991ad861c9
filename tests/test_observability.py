# Copyright (c) Microsoft. All rights reserved.
"""
Unit tests for the in-memory metrics collector.
"""

import pytest

from agentlink.observability import MetricsCollector, PerformanceTracker, metrics


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_singleton(self):
        assert MetricsCollector() is metrics

    def test_counters_and_tags(self):
        metrics.increment("relay_calls", tags={"outcome": "success"})
        metrics.increment("relay_calls", tags={"outcome": "success"})
        metrics.increment("relay_calls", value=3)

        counters = metrics.get_metrics()["counters"]

        assert counters["relay_calls[outcome=success]"] == 2
        assert counters["relay_calls"] == 3

    def test_histogram_keeps_summary_only(self):
        for value in [4.0, 1.0, 7.0] * 1000:
            metrics.histogram("relay_duration_ms", value)

        summary = metrics.get_metrics()["histograms"]["relay_duration_ms"]

        assert summary == {"count": 3000, "sum": 12000.0, "min": 1.0, "max": 7.0, "avg": 4.0}

    def test_snapshot_is_detached(self):
        metrics.gauge("forwarding_conversations", 2)
        snapshot = metrics.get_metrics()

        metrics.gauge("forwarding_conversations", 5)

        assert snapshot["gauges"]["forwarding_conversations"] == 2

    def test_performance_tracker_records_duration(self):
        with pytest.raises(RuntimeError):
            with PerformanceTracker("relay"):
                raise RuntimeError("peer down")

        summary = metrics.get_metrics()["histograms"]["relay_duration_ms"]

        assert summary["count"] == 1
        assert summary["min"] >= 0
