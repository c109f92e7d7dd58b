"""Agent Context Router - capability-based routing between blockchain agents and external contexts"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agent_router import __version__
from agent_router.agents import create_agent
from agent_router.api import router as api_router
from agent_router.core import ContextRouter, build_policy, build_transport
from agent_router.core.circuit_breaker import CircuitBreakerConfig
from agent_router.core.config import AppConfig, load_and_validate_config
from agent_router.core.logging import get_logger, setup_logging
from agent_router.core.logging_middleware import LoggingMiddleware

logger = get_logger(__name__)


def _build_router(config: AppConfig) -> ContextRouter:
    policy_kwargs = {}
    if config.router.authorization == "capability":
        policy_kwargs["trusted_agents"] = config.router.trusted_agents
    policy = build_policy(config.router.authorization, **policy_kwargs)

    transport_kwargs = {}
    if config.transport.mode == "http":
        transport_kwargs = {
            "timeout": config.transport.timeout,
            "max_retries": config.transport.max_retries,
            "retry_delay": config.transport.retry_delay,
            "circuit_breaker_config": CircuitBreakerConfig(
                failure_threshold=config.transport.failure_threshold,
                timeout=config.transport.recovery_timeout,
            ),
        }
    transport = build_transport(config.transport.mode, **transport_kwargs)

    return ContextRouter(policy=policy, transport=transport)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Router and agents are created eagerly so the app is usable without
    running the lifespan; the lifespan loads context files and closes the
    transport on shutdown.
    """
    if config is None:
        config = load_and_validate_config()
    setup_logging(
        level=config.observability.log_level,
        json_output=config.observability.log_json,
        service_name="agent-router",
    )

    context_router = _build_router(config)
    agents = {}
    for kind in ("defi", "nft"):
        agent = create_agent(kind, config=config.agents)
        agents[agent.agent_id] = agent
        logger.info("Agent created", kind=kind, agent_id=agent.agent_id, name=agent.get_name())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown"""
        logger.info("Agent router starting", version=__version__)

        contexts_dir = config.router.contexts_dir
        if contexts_dir and Path(contexts_dir).is_dir():
            await context_router.load_contexts(contexts_dir)
        elif contexts_dir:
            logger.warning("Contexts directory not found, starting with empty registry",
                           directory=contexts_dir)

        yield

        logger.info("Agent router shutting down")
        await context_router.transport.aclose()

    app = FastAPI(
        title="Agent Context Router",
        description="Capability-based routing between blockchain agents and external service contexts",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.context_router = context_router
    app.state.agents = agents
    app.state.metrics_enabled = config.observability.metrics_enabled

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(api_router, prefix="/api/v1", tags=["API v1"])

    @app.get("/health")
    async def health():
        """Simple health check endpoint"""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
