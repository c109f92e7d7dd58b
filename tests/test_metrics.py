"""Tests for Prometheus metrics"""

import pytest

from agent_router.core import metrics
from agent_router.core.metrics import (
    get_metrics,
    record_context_lookup,
    record_instruction,
    record_permission_denial,
    record_route_request,
    update_registered_contexts,
)


def sample(name: str, labels: dict = None) -> float:
    return metrics.registry.get_sample_value(name, labels or {}) or 0.0


class TestMetricsExport:

    def test_get_metrics_returns_prometheus_text(self):
        output = get_metrics()

        assert isinstance(output, bytes)
        assert b"agent_router_registered_contexts" in output
        assert b"agent_router_service_info" in output


class TestRecordingFunctions:
    """Test each record_* helper moves its metric"""

    def test_registered_contexts_gauge(self):
        update_registered_contexts(7)
        assert sample("agent_router_registered_contexts") == 7

    def test_route_request_counter_and_histogram(self):
        labels = {"context_id": "metrics-test", "status": "success"}
        before = sample("agent_router_route_requests_total", labels)
        before_count = sample("agent_router_route_duration_seconds_count", {"context_id": "metrics-test"})

        record_route_request("metrics-test", "success", 0.02)

        assert sample("agent_router_route_requests_total", labels) == before + 1
        assert sample("agent_router_route_duration_seconds_count", {"context_id": "metrics-test"}) == before_count + 1

    def test_route_request_without_duration(self):
        before_count = sample("agent_router_route_duration_seconds_count", {"context_id": "metrics-nodur"})
        record_route_request("metrics-nodur", "denied")

        assert sample("agent_router_route_duration_seconds_count", {"context_id": "metrics-nodur"}) == before_count

    @pytest.mark.parametrize("matched,result", [(0, "empty"), (3, "hit")])
    def test_context_lookup(self, matched, result):
        labels = {"kind": "capabilities", "result": result}
        before = sample("agent_router_context_lookups_total", labels)

        record_context_lookup("capabilities", matched)

        assert sample("agent_router_context_lookups_total", labels) == before + 1

    def test_permission_denial(self):
        labels = {"policy": "deny", "context_id": "metrics-test"}
        before = sample("agent_router_permission_denials_total", labels)

        record_permission_denial("deny", "metrics-test")

        assert sample("agent_router_permission_denials_total", labels) == before + 1

    def test_instruction(self):
        labels = {"agent": "Metrics Agent", "action": "swap", "status": "success"}
        before = sample("agent_router_instructions_processed_total", labels)

        record_instruction("Metrics Agent", "swap", "success")

        assert sample("agent_router_instructions_processed_total", labels) == before + 1
