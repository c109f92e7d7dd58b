"""Error taxonomy for context routing and agent execution"""

from pathlib import Path
from typing import Optional, Union


class AgentRouterError(Exception):
    """Base class for all router errors"""


class ContextLoadError(AgentRouterError):
    """A context directory could not be listed or a definition file could not be loaded"""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = str(path) if path is not None else None
        super().__init__(message)


class ContextNotFound(AgentRouterError):
    """No context is registered under the requested id"""

    def __init__(self, context_id: str):
        self.context_id = context_id
        super().__init__(f"Context {context_id} not found")


class PermissionDenied(AgentRouterError):
    """The authorization policy refused an agent's access to a context"""

    def __init__(self, agent_name: str, context_id: str):
        self.agent_name = agent_name
        self.context_id = context_id
        super().__init__(
            f"Agent {agent_name} does not have permission to access context {context_id}"
        )


class TransportError(AgentRouterError):
    """Forwarding a request to a context endpoint failed"""

    def __init__(self, message: str, context_id: Optional[str] = None,
                 status_code: Optional[int] = None):
        self.context_id = context_id
        self.status_code = status_code
        super().__init__(message)


class TransactionError(AgentRouterError):
    """An agent could not submit a transaction"""
