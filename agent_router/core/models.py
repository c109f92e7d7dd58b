"""Data models for context discovery, routing and agent responses"""

import re
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_core import core_schema


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with a Z suffix"""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ContextType(str, Enum):
    """Kinds of external services a context can describe"""
    DEX = "dex"
    NFT_MARKETPLACE = "nft_marketplace"
    ORACLE = "oracle"
    GOVERNANCE = "governance"
    SOCIAL = "social"
    IDENTITY = "identity"
    STORAGE = "storage"

    @classmethod
    def parse(cls, value: Any) -> "ContextType":
        """Coerce a member or a (case-insensitive) value string"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip().lower())
        raise ValueError(f"Invalid context type: {value!r}")


class ContextId(str):
    """
    Validated context identifier.

    Registry keys are always ContextId instances, so a typo'd or malformed id
    fails at the boundary instead of silently missing in a lookup.
    """

    PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._:-]{0,127}")

    def __new__(cls, value: Any) -> "ContextId":
        if isinstance(value, ContextId):
            return value
        if not isinstance(value, str) or not cls.PATTERN.fullmatch(value):
            raise ValueError(f"Invalid context id: {value!r}")
        return super().__new__(cls, value)

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.to_string_ser_schema(),
        )


ENDPOINT_SCHEMES = ("http://", "https://", "ws://", "wss://")


class ContextDefinition(BaseModel):
    """Declaration of an external service an agent can be routed to"""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: ContextId = Field(..., description="Unique context identifier")
    name: str = Field(..., min_length=1, description="Human-readable service name")
    description: str = Field(default="", description="What the service does")
    type: ContextType = Field(..., description="Service classification")
    capabilities: Tuple[str, ...] = Field(
        default=(),
        description="Capability tags, compared case-insensitively",
        examples=[["token_swaps", "route_optimization"]],
    )
    endpoint: Optional[str] = Field(default=None, description="Service URI")
    public_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("pubkey", "publicKey", "public_key"),
        serialization_alias="pubkey",
        description="On-chain identity of the service",
    )
    auth_required: bool = Field(
        default=False,
        validation_alias=AliasChoices("authRequired", "auth_required"),
        serialization_alias="authRequired",
    )
    request_schema: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("schema", "request_schema"),
        serialization_alias="schema",
        description="Free-form map of operation -> field -> type",
    )

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v):
        return ContextType.parse(v)

    @field_validator("capabilities", mode="before")
    @classmethod
    def validate_capabilities(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            # Allow a comma-separated string
            return tuple(cap.strip() for cap in v.split(",") if cap.strip())
        return tuple(v)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v):
        if v is not None and not v.startswith(ENDPOINT_SCHEMES):
            raise ValueError(f"Endpoint must start with one of: {', '.join(ENDPOINT_SCHEMES)}")
        return v

    @property
    def capability_keys(self) -> FrozenSet[str]:
        """Declared capabilities folded to lower case"""
        return frozenset(cap.lower() for cap in self.capabilities)

    def supports(self, capabilities: Iterable[str]) -> bool:
        """True if every requested capability is declared (case-insensitive)"""
        keys = self.capability_keys
        return all(cap.lower() in keys for cap in capabilities)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ParsedInstruction(BaseModel):
    """Structured form of a free-text instruction"""

    action: str = Field(..., description="Action tag, 'unknown' when nothing matched")
    params: Dict[str, Any] = Field(default_factory=dict)
    context: Optional[str] = Field(default=None, description="Optional context hint")
    confidence: float = Field(..., ge=0.0, le=1.0)


class ErrorCode(IntEnum):
    """Stable agent error taxonomy"""
    UNSUPPORTED_ACTION = 400
    INTERNAL_ERROR = 500


class AgentError(BaseModel):
    code: int
    message: str


class AgentResponse(BaseModel):
    """Uniform envelope returned by every agent operation"""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    data: Optional[Any] = None
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    error: Optional[AgentError] = None

    @model_validator(mode="after")
    def check_failure_has_error(self) -> "AgentResponse":
        if not self.success and self.error is None:
            raise ValueError("A failed response must carry an error")
        return self

    @classmethod
    def ok(cls, message: str, data: Optional[Any] = None,
           transaction_id: Optional[str] = None) -> "AgentResponse":
        return cls(success=True, message=message, data=data, transaction_id=transaction_id)

    @classmethod
    def unsupported(cls, action: str) -> "AgentResponse":
        return cls(
            success=False,
            message=f"Unsupported action: {action}",
            error=AgentError(
                code=ErrorCode.UNSUPPORTED_ACTION,
                message="The requested action is not supported by this agent",
            ),
        )

    @classmethod
    def internal_error(cls, exc: BaseException) -> "AgentResponse":
        return cls(
            success=False,
            message="Failed to process instruction",
            error=AgentError(
                code=ErrorCode.INTERNAL_ERROR,
                message=str(exc) or type(exc).__name__,
            ),
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContextResponse(BaseModel):
    """Result of routing a request to a context"""

    model_config = ConfigDict(populate_by_name=True)

    context_id: str = Field(..., alias="contextId")
    timestamp: str = Field(default_factory=utc_timestamp)
    status: str = "success"
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
