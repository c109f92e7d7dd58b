"""Tests for Circuit Breaker"""

import time

import pytest

from agent_router.core.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpen,
    CircuitBreakerRegistry,
    CircuitState,
)


class TestCircuitBreakerConfig:
    """Test CircuitBreakerConfig validation"""

    def test_default_config(self):
        config = CircuitBreakerConfig()

        assert config.failure_threshold == 5
        assert config.success_threshold == 2
        assert config.timeout == 60

    @pytest.mark.parametrize("kwargs", [
        {"failure_threshold": 0},
        {"success_threshold": 0},
        {"timeout": 0},
    ])
    def test_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            CircuitBreakerConfig(**kwargs)


class TestCircuitBreaker:
    """Test CircuitBreaker state transitions"""

    @pytest.fixture
    def circuit_breaker(self):
        """Create a circuit breaker with short timeouts for testing"""
        config = CircuitBreakerConfig(failure_threshold=3, success_threshold=2, timeout=0.05)
        return CircuitBreaker(name="context:test", config=config)

    def test_initial_state_is_closed(self, circuit_breaker):
        assert circuit_breaker.state == CircuitState.CLOSED
        assert circuit_breaker.can_execute()

    def test_opens_after_threshold(self, circuit_breaker):
        for _ in range(3):
            circuit_breaker.record_failure()

        assert circuit_breaker.state == CircuitState.OPEN
        assert not circuit_breaker.can_execute()

    def test_success_resets_failure_count(self, circuit_breaker):
        circuit_breaker.record_failure()
        circuit_breaker.record_failure()
        circuit_breaker.record_success()

        assert circuit_breaker.failure_count == 0
        assert circuit_breaker.state == CircuitState.CLOSED

    def test_half_open_after_timeout_then_closes(self, circuit_breaker):
        for _ in range(3):
            circuit_breaker.record_failure()
        time.sleep(0.06)

        assert circuit_breaker.can_execute()
        assert circuit_breaker.state == CircuitState.HALF_OPEN

        circuit_breaker.record_success()
        circuit_breaker.record_success()
        assert circuit_breaker.state == CircuitState.CLOSED

    def test_half_open_failure_reopens(self, circuit_breaker):
        for _ in range(3):
            circuit_breaker.record_failure()
        time.sleep(0.06)
        circuit_breaker.can_execute()

        circuit_breaker.record_failure()
        assert circuit_breaker.state == CircuitState.OPEN

    def test_context_manager(self, circuit_breaker):
        """Test exceptions inside the block count as failures"""
        for _ in range(3):
            with pytest.raises(RuntimeError):
                with circuit_breaker:
                    raise RuntimeError("endpoint down")

        with pytest.raises(CircuitBreakerOpen):
            with circuit_breaker:
                pass

    def test_reset(self, circuit_breaker):
        for _ in range(3):
            circuit_breaker.record_failure()
        circuit_breaker.reset()

        assert circuit_breaker.state == CircuitState.CLOSED
        assert circuit_breaker.get_state()["state"] == "closed"


class TestCircuitBreakerRegistry:

    def test_get_breaker_reuses_instance(self):
        registry = CircuitBreakerRegistry()

        assert registry.get_breaker("a") is registry.get_breaker("a")
        assert registry.get_breaker("a") is not registry.get_breaker("b")
        assert set(registry.get_all_states()) == {"a", "b"}

    def test_registries_are_independent(self):
        first = CircuitBreakerRegistry(CircuitBreakerConfig(failure_threshold=1))
        second = CircuitBreakerRegistry(CircuitBreakerConfig(failure_threshold=1))

        first.get_breaker("ctx").record_failure()

        assert first.get_breaker("ctx").state == CircuitState.OPEN
        assert second.get_breaker("ctx").state == CircuitState.CLOSED
