"""Configuration management with validation for the agent router"""

import os
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from agent_router.core.logging import get_logger

logger = get_logger(__name__)


def _split_list(v):
    if isinstance(v, str):
        return [item.strip() for item in v.split(',') if item.strip()]
    return v


class RouterConfig(BaseModel):
    """Context registry and access control"""
    contexts_dir: Optional[str] = Field(default="contexts", description="Directory of context definition files")
    authorization: Literal["deny", "allow_all", "capability", "grant"] = Field(
        default="capability",
        description="Authorization policy applied by check_permission"
    )
    trusted_agents: List[str] = Field(
        default_factory=list,
        description="Agent ids allowed into contexts marked authRequired (capability policy)"
    )

    @field_validator('trusted_agents', mode='before')
    @classmethod
    def validate_trusted_agents(cls, v):
        return _split_list(v)


class TransportConfig(BaseModel):
    """How routed requests reach context services"""
    mode: Literal["simulated", "http"] = Field(default="simulated", description="Transport implementation")
    timeout: float = Field(default=10.0, gt=0, le=300, description="Request timeout in seconds")
    max_retries: int = Field(default=3, ge=1, le=10, description="Attempts per request")
    retry_delay: float = Field(default=0.5, ge=0, le=60, description="Initial backoff in seconds")
    failure_threshold: int = Field(default=5, ge=1, le=100, description="Failures before a circuit opens")
    recovery_timeout: float = Field(default=60.0, gt=0, le=3600, description="Seconds before a half-open probe")


class AgentsConfig(BaseModel):
    """Defaults handed to the built-in agents"""
    supported_dexes: List[str] = Field(default_factory=lambda: ["Jupiter", "Raydium"])
    default_slippage_bps: int = Field(default=50, ge=0, le=10000)
    supported_marketplaces: List[str] = Field(default_factory=lambda: ["Magic Eden", "Tensor"])
    default_royalty_bps: int = Field(default=500, ge=0, le=10000)

    @field_validator('supported_dexes', 'supported_marketplaces', mode='before')
    @classmethod
    def validate_lists(cls, v):
        return _split_list(v)

    @field_validator('supported_dexes', 'supported_marketplaces')
    @classmethod
    def validate_non_empty(cls, v):
        if not v:
            raise ValueError("At least one venue must be configured")
        return v


class ObservabilityConfig(BaseModel):
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=True, description="Output logs as JSON")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()


class ServerConfig(BaseModel):
    cors_origins: List[str] = Field(default=["*"], description="Allowed CORS origins")

    @field_validator('cors_origins', mode='before')
    @classmethod
    def validate_cors_origins(cls, v):
        return _split_list(v)


class AppConfig(BaseModel):
    """Top-level configuration"""
    router: RouterConfig = Field(default_factory=RouterConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    agents: AgentsConfig = Field(default_factory=AgentsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables"""
        return cls(
            router=RouterConfig(
                contexts_dir=os.getenv('CONTEXTS_DIR', 'contexts') or None,
                authorization=os.getenv('AUTHZ_POLICY', 'capability'),
                trusted_agents=os.getenv('TRUSTED_AGENTS', ''),
            ),
            transport=TransportConfig(
                mode=os.getenv('TRANSPORT_MODE', 'simulated'),
                timeout=float(os.getenv('TRANSPORT_TIMEOUT', '10.0')),
                max_retries=int(os.getenv('TRANSPORT_MAX_RETRIES', '3')),
                retry_delay=float(os.getenv('TRANSPORT_RETRY_DELAY', '0.5')),
                failure_threshold=int(os.getenv('CIRCUIT_FAILURE_THRESHOLD', '5')),
                recovery_timeout=float(os.getenv('CIRCUIT_RECOVERY_TIMEOUT', '60')),
            ),
            agents=AgentsConfig(
                supported_dexes=os.getenv('SUPPORTED_DEXES', 'Jupiter,Raydium'),
                default_slippage_bps=int(os.getenv('DEFAULT_SLIPPAGE_BPS', '50')),
                supported_marketplaces=os.getenv('SUPPORTED_MARKETPLACES', 'Magic Eden,Tensor'),
                default_royalty_bps=int(os.getenv('DEFAULT_ROYALTY_BPS', '500')),
            ),
            observability=ObservabilityConfig(
                log_level=os.getenv('LOG_LEVEL', 'INFO'),
                log_json=os.getenv('LOG_JSON', 'true').lower() == 'true',
                metrics_enabled=os.getenv('METRICS_ENABLED', 'true').lower() == 'true',
            ),
            server=ServerConfig(
                cors_origins=os.getenv('CORS_ORIGINS', '*'),
            ),
        )

    def validate_config(self) -> list[str]:
        """Validate configuration and return warnings"""
        warnings = []

        if self.router.authorization == "allow_all":
            warnings.append("AUTHZ_POLICY=allow_all - every agent can reach every context. Do not use in production.")

        if self.router.authorization == "deny":
            warnings.append("AUTHZ_POLICY=deny - all routing requests will be refused")

        if self.router.authorization == "grant":
            warnings.append("AUTHZ_POLICY=grant starts with no grants - add them programmatically")

        if self.router.trusted_agents and self.router.authorization != "capability":
            warnings.append("TRUSTED_AGENTS is only used by the capability policy")

        if self.transport.mode == "simulated":
            warnings.append("TRANSPORT_MODE=simulated - routed requests never leave the process")

        if "*" in self.server.cors_origins:
            warnings.append("CORS allows all origins (*) - INSECURE for production. Set CORS_ORIGINS env var.")

        return warnings

    def log_config(self):
        """Log configuration"""
        logger.info("Configuration loaded",
                    contexts_dir=self.router.contexts_dir,
                    authorization=self.router.authorization,
                    transport_mode=self.transport.mode,
                    transport_timeout=self.transport.timeout,
                    log_level=self.observability.log_level,
                    metrics_enabled=self.observability.metrics_enabled)


def load_and_validate_config() -> AppConfig:
    """Load configuration from environment and validate"""
    try:
        config = AppConfig.from_env()
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise ValueError(f"Invalid configuration: {e}") from e

    for warning in config.validate_config():
        logger.warning(f"Configuration warning: {warning}")

    config.log_config()
    return config
