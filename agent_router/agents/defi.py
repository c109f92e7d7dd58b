"""Agent for simulated DeFi operations: swaps, liquidity, price checks"""

from typing import Any, Dict, List, Optional

from agent_router.agents.base import (
    ActionHandler,
    BaseAgent,
    InstructionParser,
    TransactionSubmitter,
    require_param,
)
from agent_router.core.models import AgentResponse, utc_timestamp


class SolanaDeFiAgent(BaseAgent):

    def __init__(
        self,
        agent_id: str,
        supported_dexes: Optional[List[str]] = None,
        default_slippage_bps: int = 50,
        parser: Optional[InstructionParser] = None,
        submitter: Optional[TransactionSubmitter] = None,
    ):
        super().__init__(agent_id, parser=parser, submitter=submitter)
        self.supported_dexes = list(supported_dexes or ["Jupiter", "Raydium"])
        self.default_slippage_bps = default_slippage_bps

    def get_name(self) -> str:
        return "Solana DeFi Agent"

    def get_description(self) -> str:
        return ("An agent specialized for DeFi operations on Solana, including swaps, "
                "liquidity provision, and yield farming.")

    def get_capabilities(self) -> List[str]:
        return [
            "Token Swaps",
            "Liquidity Provision",
            "Yield Farming",
            "Price Monitoring",
            "Portfolio Management",
        ]

    def actions(self) -> Dict[str, ActionHandler]:
        return {
            "swap": self._swap,
            "addLiquidity": self._add_liquidity,
            "checkPrice": self._check_price,
        }

    async def get_state(self) -> Dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "supportedDexes": list(self.supported_dexes),
            "defaultSlippageBps": self.default_slippage_bps,
        }

    async def _swap(self, params: Dict[str, Any]) -> AgentResponse:
        source = require_param(params, "sourceToken")
        target = require_param(params, "targetToken")
        amount = require_param(params, "amount")
        slippage_bps = params.get("slippageBps") or self.default_slippage_bps

        # Quote is a placeholder until a DEX aggregator is wired in
        return AgentResponse.ok(
            message=f"Simulated swap of {amount} {source} to {target} with {slippage_bps / 100}% slippage",
            data={
                "sourceToken": source,
                "targetToken": target,
                "amount": amount,
                "slippageBps": slippage_bps,
                "estimatedOutput": "123.45",
                "route": f"{self.supported_dexes[0].lower()}_v4",
            },
        )

    async def _add_liquidity(self, params: Dict[str, Any]) -> AgentResponse:
        pool_id = require_param(params, "poolId")
        return AgentResponse.ok(
            message=f"Added liquidity to pool {pool_id}",
            data={
                "poolId": pool_id,
                "tokenA": require_param(params, "tokenA"),
                "amountA": require_param(params, "amountA"),
                "tokenB": require_param(params, "tokenB"),
                "amountB": require_param(params, "amountB"),
                "lpTokens": "10.5",
            },
        )

    async def _check_price(self, params: Dict[str, Any]) -> AgentResponse:
        token = require_param(params, "token")
        return AgentResponse.ok(
            message=f"Current price for {token}",
            data={
                "token": token,
                "priceUsd": "1.23",
                "timestamp": utc_timestamp(),
            },
        )
