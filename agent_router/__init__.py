"""
Agent Context Router

Capability-based registry and permission-gated routing between Solana
agents and the external service contexts (DEXes, NFT marketplaces, oracles)
they talk to.
"""

__version__ = "0.1.0"

from agent_router.core import ContextRouter
from agent_router.agents import NFTMarketAgent, SolanaDeFiAgent, create_agent

__all__ = [
    "__version__",
    "ContextRouter",
    "SolanaDeFiAgent",
    "NFTMarketAgent",
    "create_agent",
]
