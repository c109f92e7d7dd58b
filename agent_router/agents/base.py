"""Agent protocol and the shared instruction dispatch policy"""

import secrets
import uuid
from abc import ABC, abstractmethod
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

from agent_router.core.exceptions import TransactionError
from agent_router.core.logging import get_logger, reset_agent_id, set_agent_id
from agent_router.core.metrics import record_instruction, record_transaction
from agent_router.core.models import AgentResponse, ParsedInstruction
from agent_router.nlp import parse_instruction

logger = get_logger(__name__)

InstructionParser = Callable[[str], ParsedInstruction]
ActionHandler = Callable[[Dict[str, Any]], Awaitable[AgentResponse]]


@runtime_checkable
class Agent(Protocol):
    """What the router and the API need from an agent"""

    def get_name(self) -> str:
        ...

    def get_description(self) -> str:
        ...

    def get_capabilities(self) -> List[str]:
        ...

    async def process_instruction(self, instruction: str) -> AgentResponse:
        ...

    async def execute_transaction(self, transaction: Any) -> str:
        ...

    async def get_state(self) -> Dict[str, Any]:
        ...


class TransactionSubmitter(Protocol):
    """Signs and submits a transaction, returning its signature"""

    async def submit(self, transaction: Any) -> str:
        ...


class SimulatedSubmitter:
    """Accepts every transaction and hands back a fake signature"""

    def __init__(self):
        self.submitted: List[Dict[str, Any]] = []

    async def submit(self, transaction: Any) -> str:
        signature = f"sim-{uuid.uuid4().hex}"
        self.submitted.append({"signature": signature, "transaction": transaction})
        return signature


def generate_agent_id() -> str:
    return secrets.token_hex(16)


def require_param(params: Dict[str, Any], name: str) -> Any:
    """Value of a parameter the handler cannot run without"""
    value = params.get(name)
    if value is None or value == "":
        raise ValueError(f"Missing parameter: {name}")
    return value


class BaseAgent(ABC):
    """
    Dispatch policy shared by every agent.

    Subclasses only declare metadata, a state snapshot and a dispatch table
    mapping action tags to handlers. process_instruction then guarantees the
    uniform envelope:
    - known action: whatever the handler returns
    - unknown action: failure with code 400
    - any exception while parsing or handling: failure with code 500
    """

    def __init__(
        self,
        agent_id: str,
        parser: Optional[InstructionParser] = None,
        submitter: Optional[TransactionSubmitter] = None,
    ):
        self.agent_id = agent_id
        self.parser = parser or parse_instruction
        self.submitter = submitter

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def get_description(self) -> str:
        pass

    @abstractmethod
    def get_capabilities(self) -> List[str]:
        pass

    @abstractmethod
    def actions(self) -> Dict[str, ActionHandler]:
        """Action tag -> handler taking the parsed params"""
        pass

    @abstractmethod
    async def get_state(self) -> Dict[str, Any]:
        pass

    async def process_instruction(self, instruction: str) -> AgentResponse:
        token = set_agent_id(self.agent_id)
        action = "unparsed"
        try:
            parsed = self.parser(instruction)
            action = parsed.action
            handler = self.actions().get(action)

            if handler is None:
                logger.info("Unsupported action", agent=self.get_name(), action=action)
                record_instruction(self.get_name(), action, "unsupported")
                return AgentResponse.unsupported(action)

            response = await handler(parsed.params)
            record_instruction(self.get_name(), action, "success" if response.success else "failure")
            return response

        except Exception as e:
            logger.exception("Instruction processing failed", agent=self.get_name(), action=action)
            record_instruction(self.get_name(), action, "error")
            return AgentResponse.internal_error(e)
        finally:
            reset_agent_id(token)

    async def execute_transaction(self, transaction: Any) -> str:
        """
        Submit a transaction through the configured submitter.

        Raises:
            TransactionError: no submitter configured, or submission failed
        """
        try:
            if self.submitter is None:
                raise TransactionError("No wallet configured for transaction execution")
            signature = await self.submitter.submit(transaction)
        except Exception as e:
            record_transaction(self.get_name(), "error")
            raise TransactionError(f"Transaction execution failed: {e}") from e

        record_transaction(self.get_name(), "success")
        logger.info("Transaction submitted", agent=self.get_name(), signature=signature)
        return signature
