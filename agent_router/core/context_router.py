"""Context registry, capability discovery and permission-gated request routing"""

import asyncio
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from agent_router.core.authorization import AccessRequest, AuthorizationPolicy, DenyAllPolicy
from agent_router.core.exceptions import ContextLoadError, ContextNotFound, PermissionDenied, TransportError
from agent_router.core.logging import get_logger
from agent_router.core.metrics import (
    record_context_file_loaded,
    record_context_lookup,
    record_context_overwrite,
    record_permission_denial,
    record_route_request,
    update_registered_contexts,
)
from agent_router.core.models import ContextDefinition, ContextId, ContextResponse, ContextType
from agent_router.core.parsers import get_parser
from agent_router.core.transport import SimulatedTransport, TransportClient

if TYPE_CHECKING:
    from agent_router.agents.base import Agent

logger = get_logger(__name__)


class ContextRouter:
    """
    Registry of external service contexts and the gate agents pass through to reach them.

    Discovery:
    - find_contexts_by_capabilities: AND match, case-insensitive per capability
    - find_contexts_by_type: exact ContextType match

    Routing:
    1. Context must be registered (ContextNotFound otherwise)
    2. AuthorizationPolicy must allow the agent (PermissionDenied otherwise)
    3. TransportClient delivers the request

    Registry writes from load_contexts are serialized by a lock; queries read a
    snapshot of the registry and never block.
    """

    def __init__(
        self,
        policy: Optional[AuthorizationPolicy] = None,
        transport: Optional[TransportClient] = None,
    ):
        self.policy = policy or DenyAllPolicy()
        self.transport = transport or SimulatedTransport()
        self._contexts: Dict[ContextId, ContextDefinition] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, context_id: object) -> bool:
        return self._lookup(context_id) is not None

    def _lookup(self, context_id: Any) -> Optional[ContextDefinition]:
        try:
            key = ContextId(context_id)
        except ValueError:
            return None
        return self._contexts.get(key)

    def _snapshot(self) -> List[ContextDefinition]:
        return list(self._contexts.values())

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def load_contexts(self, directory: Union[str, Path]) -> int:
        """
        Load every recognized definition file in a directory.

        Files are visited in name order; subdirectories and files with other
        extensions are skipped. A failing file aborts the load, but contexts
        registered before it stay registered.

        Args:
            directory: Directory holding .yaml/.yml/.json/.toml files

        Returns:
            Number of definitions loaded by this call

        Raises:
            ContextLoadError: directory unreadable, or a file unreadable, unparsable or invalid
        """
        directory = Path(directory)

        async with self._lock:
            try:
                entries = sorted(await asyncio.to_thread(lambda: list(directory.iterdir())))
            except OSError as e:
                logger.error("Failed to list context directory", directory=str(directory), error=str(e))
                raise ContextLoadError(f"Cannot read context directory {directory}: {e}", directory) from e

            loaded = 0
            for path in entries:
                parser = get_parser(path)
                if parser is None or not path.is_file():
                    continue

                try:
                    text = await asyncio.to_thread(path.read_text, encoding="utf-8")
                except OSError as e:
                    record_context_file_loaded(parser.format_name, "error")
                    raise ContextLoadError(f"Cannot read context file {path}: {e}", path) from e

                result = parser.parse(text)
                if not result.success:
                    record_context_file_loaded(parser.format_name, "error")
                    logger.error("Failed to parse context file", path=str(path), error=result.error)
                    raise ContextLoadError(f"Invalid context file {path}: {result.error}", path)

                try:
                    definition = ContextDefinition.model_validate(result.data)
                except ValidationError as e:
                    record_context_file_loaded(parser.format_name, "error")
                    logger.error("Invalid context definition", path=str(path), errors=e.error_count())
                    raise ContextLoadError(f"Invalid context definition in {path}: {e}", path) from e

                self.register_context(definition)
                record_context_file_loaded(parser.format_name, "success")
                loaded += 1

        logger.info(f"Loaded {len(self._contexts)} context definitions",
                    directory=str(directory), files_loaded=loaded)
        return loaded

    def register_context(
        self, definition: Union[ContextDefinition, Mapping[str, Any]]
    ) -> ContextDefinition:
        """
        Insert a definition, replacing any existing one with the same id.

        Args:
            definition: A ContextDefinition, or a mapping validated into one

        Returns:
            The registered definition
        """
        if not isinstance(definition, ContextDefinition):
            definition = ContextDefinition.model_validate(definition)

        if definition.id in self._contexts:
            logger.warning(f"Context with ID {definition.id} already registered, overwriting",
                           context_id=definition.id)
            record_context_overwrite()

        self._contexts[definition.id] = definition
        update_registered_contexts(len(self._contexts))
        logger.debug("Context registered", context_id=definition.id, type=definition.type.value)
        return definition

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def get_context(self, context_id: str) -> Optional[ContextDefinition]:
        return self._lookup(context_id)

    def list_contexts(self) -> List[ContextDefinition]:
        return self._snapshot()

    def find_contexts_by_capabilities(self, capabilities: Iterable[str]) -> List[ContextDefinition]:
        """
        Contexts declaring every requested capability.

        An empty request matches every context and a bare string is treated as
        a single capability. Never raises on no match.
        """
        if isinstance(capabilities, str):
            capabilities = [capabilities]
        required = list(capabilities)
        matches = [context for context in self._snapshot() if context.supports(required)]
        record_context_lookup("capabilities", len(matches))
        return matches

    def find_contexts_by_type(self, context_type: Union[ContextType, str]) -> List[ContextDefinition]:
        """Contexts of the given type. Never raises on no match."""
        wanted = ContextType.parse(context_type)
        matches = [context for context in self._snapshot() if context.type == wanted]
        record_context_lookup("type", len(matches))
        return matches

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    async def _authorize(self, agent: "Agent", context: ContextDefinition) -> Optional[str]:
        """Id of the agent when the policy allows it, None otherwise"""
        state = await agent.get_state()
        agent_id = str(state.get("agentId") or "")
        if not agent_id:
            logger.warning("Agent state carries no agentId, denying", context_id=context.id)
            record_permission_denial(self.policy.name, context.id)
            return None

        request = AccessRequest(
            agent_id=agent_id,
            agent_name=agent.get_name(),
            context=context,
            capabilities=list(agent.get_capabilities()),
            state=state,
        )
        allowed = await self.policy.is_allowed(request)
        if not allowed:
            logger.warning("Permission denied",
                           agent_id=agent_id,
                           context_id=context.id,
                           policy=self.policy.name)
            record_permission_denial(self.policy.name, context.id)
            return None
        return agent_id

    async def check_permission(self, agent: "Agent", context_id: str) -> bool:
        """
        Whether the agent may access the context.

        False for unregistered or malformed ids; otherwise the configured
        AuthorizationPolicy decides.
        """
        context = self._lookup(context_id)
        if context is None:
            return False
        return await self._authorize(agent, context) is not None

    async def route_request(
        self,
        agent: "Agent",
        context_id: str,
        request: Dict[str, Any],
    ) -> ContextResponse:
        """
        Forward a request to a context on behalf of an agent.

        Raises:
            ContextNotFound: context_id is not registered
            PermissionDenied: the policy refused the agent
            TransportError: delivery to the context failed
        """
        context = self._lookup(context_id)
        if context is None:
            record_route_request("unregistered", "not_found")
            raise ContextNotFound(context_id)

        agent_id = await self._authorize(agent, context)
        if agent_id is None:
            record_route_request(context.id, "denied")
            raise PermissionDenied(agent.get_name(), context.id)

        start = time.perf_counter()
        try:
            response = await self.transport.send(context, request, agent_id=agent_id)
        except TransportError:
            record_route_request(context.id, "error", time.perf_counter() - start)
            raise

        record_route_request(context.id, "success", time.perf_counter() - start)
        logger.info("Request routed", context_id=context.id, agent=agent.get_name())
        return response
