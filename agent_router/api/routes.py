"""REST API routes for the agent router"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field, ValidationError

from agent_router.core.exceptions import ContextNotFound, PermissionDenied, TransportError
from agent_router.core.logging import get_logger
from agent_router.core.metrics import get_metrics
from agent_router.core.models import ContextDefinition

router = APIRouter()
logger = get_logger(__name__)


class InstructionRequest(BaseModel):
    instruction: str = Field(..., min_length=1, description="Natural-language instruction")


class RouteRequest(BaseModel):
    context_id: str = Field(..., min_length=1, description="Target context id")
    request: Dict[str, Any] = Field(default_factory=dict, description="Payload forwarded to the context")


def _get_agent(request: Request, agent_id: str):
    agent = request.app.state.agents.get(agent_id)
    if agent is None:
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found")
    return agent


async def _describe_agent(agent) -> dict:
    return {
        "name": agent.get_name(),
        "description": agent.get_description(),
        "capabilities": agent.get_capabilities(),
        "state": await agent.get_state(),
    }


@router.get("/health")
async def health(request: Request):
    """Health check with registry size"""
    context_router = request.app.state.context_router
    return {
        "status": "healthy",
        "contexts": len(context_router),
        "agents": len(request.app.state.agents),
        "policy": context_router.policy.name,
    }


@router.get("/metrics")
async def metrics(request: Request):
    """Prometheus metrics endpoint"""
    if not getattr(request.app.state, "metrics_enabled", True):
        raise HTTPException(status_code=404, detail="Metrics are disabled")
    return Response(content=get_metrics(), media_type="text/plain; version=0.0.4")


# ----------------------------------------------------------------------
# Contexts
# ----------------------------------------------------------------------

@router.get("/contexts")
async def list_contexts(
    request: Request,
    capability: List[str] = Query(default=[]),
    type: Optional[str] = Query(default=None),
):
    """List contexts, optionally filtered by capabilities (AND) and type"""
    context_router = request.app.state.context_router

    if type is not None:
        try:
            contexts = context_router.find_contexts_by_type(type)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    else:
        contexts = context_router.list_contexts()

    if capability:
        wanted = {c.id for c in context_router.find_contexts_by_capabilities(capability)}
        contexts = [c for c in contexts if c.id in wanted]

    return {"contexts": [c.to_wire() for c in contexts], "count": len(contexts)}


@router.get("/contexts/{context_id}")
async def get_context(request: Request, context_id: str):
    context = request.app.state.context_router.get_context(context_id)
    if context is None:
        raise HTTPException(status_code=404, detail=f"Context {context_id} not found")
    return context.to_wire()


@router.post("/contexts", status_code=201)
async def register_context(request: Request, body: Dict[str, Any]):
    """Register or replace a context definition"""
    try:
        definition = ContextDefinition.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    definition = request.app.state.context_router.register_context(definition)
    logger.info("Context registered via API", context_id=definition.id)
    return definition.to_wire()


# ----------------------------------------------------------------------
# Agents
# ----------------------------------------------------------------------

@router.get("/agents")
async def list_agents(request: Request):
    agents = [await _describe_agent(agent) for agent in request.app.state.agents.values()]
    return {"agents": agents, "count": len(agents)}


@router.get("/agents/{agent_id}")
async def get_agent(request: Request, agent_id: str):
    return await _describe_agent(_get_agent(request, agent_id))


@router.post("/agents/{agent_id}/instructions")
async def process_instruction(request: Request, agent_id: str, body: InstructionRequest):
    """Run a natural-language instruction through an agent"""
    agent = _get_agent(request, agent_id)
    response = await agent.process_instruction(body.instruction)
    return response.to_wire()


@router.post("/agents/{agent_id}/route")
async def route_request(request: Request, agent_id: str, body: RouteRequest):
    """Route a request to a context on behalf of an agent"""
    agent = _get_agent(request, agent_id)
    context_router = request.app.state.context_router

    try:
        response = await context_router.route_request(agent, body.context_id, body.request)
    except ContextNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except TransportError as e:
        logger.error("Routing failed", context_id=body.context_id, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))

    return response.to_wire()
