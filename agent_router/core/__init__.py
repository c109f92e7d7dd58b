"""Context registry, discovery and routing"""

from .context_router import ContextRouter
from .authorization import (
    AccessRequest,
    AuthorizationPolicy,
    AllowAllPolicy,
    CapabilityPolicy,
    DenyAllPolicy,
    GrantPolicy,
    build_policy,
)
from .transport import TransportClient, SimulatedTransport, HttpTransport, build_transport
from .exceptions import (
    AgentRouterError,
    ContextLoadError,
    ContextNotFound,
    PermissionDenied,
    TransportError,
    TransactionError,
)
from .models import (
    AgentError,
    AgentResponse,
    ContextDefinition,
    ContextId,
    ContextResponse,
    ContextType,
    ErrorCode,
    ParsedInstruction,
)

__all__ = [
    "ContextRouter",
    "AccessRequest",
    "AuthorizationPolicy",
    "AllowAllPolicy",
    "CapabilityPolicy",
    "DenyAllPolicy",
    "GrantPolicy",
    "build_policy",
    "TransportClient",
    "SimulatedTransport",
    "HttpTransport",
    "build_transport",
    "AgentRouterError",
    "ContextLoadError",
    "ContextNotFound",
    "PermissionDenied",
    "TransportError",
    "TransactionError",
    "AgentError",
    "AgentResponse",
    "ContextDefinition",
    "ContextId",
    "ContextResponse",
    "ContextType",
    "ErrorCode",
    "ParsedInstruction",
]
