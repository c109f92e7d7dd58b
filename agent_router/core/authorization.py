"""Authorization policies deciding which agents may reach which contexts"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from agent_router.core.logging import get_logger
from agent_router.core.models import ContextDefinition

logger = get_logger(__name__)

WILDCARD = "*"
TYPE_GRANT_PREFIX = "type:"


def normalize_capability(capability: str) -> str:
    """'Token Swaps' -> 'token_swaps'"""
    return "_".join(capability.strip().lower().split())


@dataclass
class AccessRequest:
    """Everything a policy may look at when deciding"""
    agent_id: str
    agent_name: str
    context: ContextDefinition
    capabilities: List[str] = field(default_factory=list)
    state: Dict[str, Any] = field(default_factory=dict)


class AuthorizationPolicy(ABC):
    """Decides whether an agent may access a registered context"""

    name: str = "policy"

    @abstractmethod
    async def is_allowed(self, request: AccessRequest) -> bool:
        pass


class DenyAllPolicy(AuthorizationPolicy):
    """Refuses every request. Used when nothing better has been configured."""

    name = "deny"

    async def is_allowed(self, request: AccessRequest) -> bool:
        return False


class AllowAllPolicy(AuthorizationPolicy):
    """Grants every request. Only for local development and tests."""

    name = "allow_all"

    def __init__(self):
        logger.warning("AllowAllPolicy in use - every agent may access every context")

    async def is_allowed(self, request: AccessRequest) -> bool:
        return True


class CapabilityPolicy(AuthorizationPolicy):
    """
    Grants access when the agent and the context share a capability.

    Agent capabilities are human-readable ("Token Swaps") while context
    capabilities are tags ("token_swaps"); both sides are normalized before
    comparing. Contexts marked auth_required additionally need the agent to be
    in trusted_agents.
    """

    name = "capability"

    def __init__(self, trusted_agents: Optional[Iterable[str]] = None):
        self.trusted_agents: Set[str] = set(trusted_agents or ())

    async def is_allowed(self, request: AccessRequest) -> bool:
        if request.context.auth_required and request.agent_id not in self.trusted_agents:
            return False

        agent_caps = {normalize_capability(cap) for cap in request.capabilities}
        context_caps = {normalize_capability(cap) for cap in request.context.capabilities}
        return bool(agent_caps & context_caps)


class GrantPolicy(AuthorizationPolicy):
    """
    Explicit per-agent grants.

    A grant is a context id, "type:<context_type>" or "*" for everything.
    """

    name = "grant"

    def __init__(self, grants: Optional[Mapping[str, Iterable[str]]] = None):
        self.grants: Dict[str, Set[str]] = {
            agent_id: set(agent_grants) for agent_id, agent_grants in (grants or {}).items()
        }

    def grant(self, agent_id: str, *grants: str) -> None:
        self.grants.setdefault(agent_id, set()).update(grants)

    def revoke(self, agent_id: str, *grants: str) -> None:
        self.grants.get(agent_id, set()).difference_update(grants)

    async def is_allowed(self, request: AccessRequest) -> bool:
        agent_grants = self.grants.get(request.agent_id, set())
        context = request.context
        return (
            WILDCARD in agent_grants
            or context.id in agent_grants
            or f"{TYPE_GRANT_PREFIX}{context.type.value}" in agent_grants
        )


POLICIES = {
    DenyAllPolicy.name: DenyAllPolicy,
    AllowAllPolicy.name: AllowAllPolicy,
    CapabilityPolicy.name: CapabilityPolicy,
    GrantPolicy.name: GrantPolicy,
}


def build_policy(name: str, **kwargs) -> AuthorizationPolicy:
    """
    Construct a policy from its configured name.

    Args:
        name: One of 'deny', 'allow_all', 'capability', 'grant'
        **kwargs: Passed to the policy constructor (trusted_agents, grants)
    """
    try:
        policy_cls = POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown authorization policy: {name}") from None
    return policy_cls(**kwargs)
