"""Circuit breaker guarding calls to context endpoints"""

import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass
from datetime import datetime, timezone

from agent_router.core.logging import get_logger
from agent_router.core.metrics import record_circuit_transition

logger = get_logger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, rejecting requests
    HALF_OPEN = "half_open"  # Probing whether the endpoint recovered


_STATE_GAUGE = {
    CircuitState.CLOSED: 0,
    CircuitState.HALF_OPEN: 1,
    CircuitState.OPEN: 2,
}


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 5  # Failures before opening
    success_threshold: int = 2  # Successes in half-open before closing
    timeout: float = 60.0  # Seconds before trying half-open

    def __post_init__(self):
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if self.success_threshold < 1:
            raise ValueError("success_threshold must be >= 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")


class CircuitBreakerOpen(Exception):
    """Raised when a call is attempted while the circuit is open"""


class CircuitBreaker:
    """
    Per-endpoint circuit breaker.

    States:
    - CLOSED: requests pass through
    - OPEN: too many consecutive failures, requests are rejected
    - HALF_OPEN: timeout elapsed, a limited number of probes are let through

    Usage:
        breaker = CircuitBreaker(name="context:jupiter-dex-v4")

        with breaker:
            response = await client.post(...)
    """

    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None):
        self.name = name
        self.config = config or CircuitBreakerConfig()

        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[float] = None
        self.last_state_change: float = time.time()

    def __enter__(self):
        if not self.can_execute():
            raise CircuitBreakerOpen(f"Circuit breaker '{self.name}' is OPEN")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.record_success()
        else:
            self.record_failure()
        return False

    def can_execute(self) -> bool:
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if self.last_failure_time and \
               (time.time() - self.last_failure_time) >= self.config.timeout:
                self._transition(CircuitState.HALF_OPEN)
                return True
            return False

        return True

    def record_success(self):
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.config.success_threshold:
                self._transition(CircuitState.CLOSED)
        elif self.failure_count > 0:
            self.failure_count = 0

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = time.time()

        logger.warning("Circuit breaker failure recorded",
                       breaker=self.name,
                       failure_count=self.failure_count,
                       threshold=self.config.failure_threshold,
                       state=self.state.value)

        if self.state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN)
        elif self.state == CircuitState.CLOSED and \
                self.failure_count >= self.config.failure_threshold:
            self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState):
        old_state = self.state
        self.state = new_state
        self.last_state_change = time.time()
        self.success_count = 0
        if new_state != CircuitState.OPEN:
            self.failure_count = 0

        record_circuit_transition(self.name, old_state.value, new_state.value,
                                  _STATE_GAUGE[new_state])

        log = logger.error if new_state == CircuitState.OPEN else logger.info
        log("Circuit breaker state changed",
            breaker=self.name,
            from_state=old_state.value,
            to_state=new_state.value)

    def reset(self):
        self._transition(CircuitState.CLOSED)

    def get_state(self) -> dict:
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
            "last_failure_time": datetime.fromtimestamp(
                self.last_failure_time, tz=timezone.utc
            ).isoformat() if self.last_failure_time else None,
            "last_state_change": datetime.fromtimestamp(
                self.last_state_change, tz=timezone.utc
            ).isoformat(),
        }


class CircuitBreakerRegistry:
    """Breakers keyed by name, created on first use"""

    def __init__(self, config: Optional[CircuitBreakerConfig] = None):
        self.config = config
        self._breakers: Dict[str, CircuitBreaker] = {}

    def get_breaker(self, name: str) -> CircuitBreaker:
        if name not in self._breakers:
            self._breakers[name] = CircuitBreaker(name, self.config)
        return self._breakers[name]

    def get_all_states(self) -> Dict[str, dict]:
        return {name: breaker.get_state() for name, breaker in self._breakers.items()}

    def reset_all(self):
        for breaker in self._breakers.values():
            breaker.reset()
