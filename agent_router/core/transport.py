"""Transport clients that forward routed requests to context services"""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from agent_router.core.circuit_breaker import (
    CircuitBreakerConfig,
    CircuitBreakerOpen,
    CircuitBreakerRegistry,
)
from agent_router.core.exceptions import TransportError
from agent_router.core.logging import get_logger
from agent_router.core.metrics import record_transport_retry
from agent_router.core.models import ContextDefinition, ContextResponse

logger = get_logger(__name__)


class TransportClient(ABC):
    """Delivers a request to a context and returns its response"""

    @abstractmethod
    async def send(
        self,
        context: ContextDefinition,
        request: Dict[str, Any],
        agent_id: str,
    ) -> ContextResponse:
        pass

    async def aclose(self) -> None:
        """Release any held connections"""
        return None


class SimulatedTransport(TransportClient):
    """Answers locally without contacting the context endpoint"""

    async def send(
        self,
        context: ContextDefinition,
        request: Dict[str, Any],
        agent_id: str,
    ) -> ContextResponse:
        return ContextResponse(
            context_id=context.id,
            status="success",
            data={
                "message": f"Processed request to {context.name}",
                "requestSummary": request,
            },
        )


class HttpTransport(TransportClient):
    """
    Forwards requests to context endpoints over HTTP.

    Features:
    - Per-request timeout
    - Retries with exponential backoff and jitter on timeouts, connection
      errors and 5xx responses; 4xx responses fail immediately
    - One circuit breaker per context
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        circuit_breaker_config: Optional[CircuitBreakerConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            timeout: Request timeout in seconds
            max_retries: Total attempts per request (at least 1)
            retry_delay: Initial delay between attempts, doubled each time
            circuit_breaker_config: Thresholds for the per-context breakers
            client: Pre-built client (tests inject one with a mock transport)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.breakers = CircuitBreakerRegistry(circuit_breaker_config or CircuitBreakerConfig())
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _calculate_delay(self, attempt: int) -> float:
        delay = min(self.retry_delay * (2 ** attempt), 30.0)
        jitter = delay * 0.25
        delay += random.uniform(-jitter, jitter)
        return max(0, delay)

    async def send(
        self,
        context: ContextDefinition,
        request: Dict[str, Any],
        agent_id: str,
    ) -> ContextResponse:
        if not context.endpoint:
            raise TransportError(f"Context {context.id} has no endpoint", context_id=context.id)

        breaker = self.breakers.get_breaker(f"context:{context.id}")
        try:
            with breaker:
                body = await self._post(context, request, agent_id)
        except CircuitBreakerOpen as e:
            raise TransportError(str(e), context_id=context.id) from e

        return ContextResponse(
            context_id=context.id,
            status="success",
            data=body if isinstance(body, dict) else {"result": body},
        )

    async def _post(self, context: ContextDefinition, request: Dict[str, Any], agent_id: str) -> Any:
        payload = {"agentId": agent_id, "contextId": context.id, "request": request}
        headers = {"Content-Type": "application/json", "X-Agent-Id": agent_id}
        last_error: Optional[str] = None

        for attempt in range(self.max_retries):
            try:
                response = await self.client.post(
                    context.endpoint, json=payload, headers=headers, timeout=self.timeout
                )
                if response.status_code < 400:
                    if not response.content:
                        return {}
                    try:
                        return response.json()
                    except ValueError as e:
                        raise TransportError(
                            f"Context {context.id} returned invalid JSON",
                            context_id=context.id,
                            status_code=response.status_code,
                        ) from e

                if response.status_code < 500:
                    raise TransportError(
                        f"Context {context.id} rejected request with status {response.status_code}",
                        context_id=context.id,
                        status_code=response.status_code,
                    )
                last_error = f"status {response.status_code}"

            except httpx.TimeoutException:
                last_error = "timeout"
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"

            logger.warning("Context request failed",
                           context_id=context.id,
                           attempt=attempt + 1,
                           max_attempts=self.max_retries,
                           error=last_error)

            if attempt < self.max_retries - 1:
                record_transport_retry(context.id)
                await asyncio.sleep(self._calculate_delay(attempt))

        raise TransportError(
            f"Context {context.id} unreachable after {self.max_retries} attempts: {last_error}",
            context_id=context.id,
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def build_transport(mode: str, **kwargs) -> TransportClient:
    """
    Construct a transport from its configured mode.

    Args:
        mode: 'simulated' or 'http'
        **kwargs: HttpTransport options (ignored for 'simulated')
    """
    if mode == "simulated":
        return SimulatedTransport()
    if mode == "http":
        return HttpTransport(**kwargs)
    raise ValueError(f"Unknown transport mode: {mode}")
