"""Agents that turn instructions into (simulated) on-chain actions"""

from typing import Optional

from .base import Agent, BaseAgent, SimulatedSubmitter, TransactionSubmitter, generate_agent_id
from .defi import SolanaDeFiAgent
from .nft import NFTMarketAgent


def create_agent(kind: str, agent_id: Optional[str] = None, config=None, **kwargs) -> BaseAgent:
    """
    Build an agent by kind.

    Args:
        kind: 'defi' or 'nft'
        agent_id: Agent id (generated when omitted)
        config: Optional AgentsConfig supplying venue and fee defaults
        **kwargs: Passed through to the agent (parser, submitter)
    """
    agent_id = agent_id or generate_agent_id()

    if kind == "defi":
        if config is not None:
            kwargs.setdefault("supported_dexes", config.supported_dexes)
            kwargs.setdefault("default_slippage_bps", config.default_slippage_bps)
        return SolanaDeFiAgent(agent_id, **kwargs)

    if kind == "nft":
        if config is not None:
            kwargs.setdefault("supported_marketplaces", config.supported_marketplaces)
            kwargs.setdefault("default_royalty_bps", config.default_royalty_bps)
        return NFTMarketAgent(agent_id, **kwargs)

    raise ValueError(f"Unknown agent kind: {kind}")


__all__ = [
    "Agent",
    "BaseAgent",
    "SimulatedSubmitter",
    "TransactionSubmitter",
    "generate_agent_id",
    "SolanaDeFiAgent",
    "NFTMarketAgent",
    "create_agent",
]
