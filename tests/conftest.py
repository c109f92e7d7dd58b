"""Pytest configuration and shared fixtures"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
import pytest_asyncio
import yaml

from agent_router.agents import NFTMarketAgent, SolanaDeFiAgent
from agent_router.core import AllowAllPolicy, ContextRouter
from agent_router.core.models import ContextDefinition


JUPITER = {
    "id": "jupiter-dex-v4",
    "name": "Jupiter Aggregator",
    "description": "A liquidity aggregator for Solana",
    "type": "dex",
    "capabilities": ["token_swaps", "route_optimization", "price_discovery", "slippage_protection"],
    "endpoint": "https://quote-api.jup.ag/v4",
    "pubkey": "JUP4Fb2cqiRUcaTHdrPC8h2gNsA2ETXiPDD33WcGuJB",
    "authRequired": False,
    "schema": {
        "swapQuote": {"inputMint": "string", "outputMint": "string"},
    },
}

MAGIC_EDEN = {
    "id": "magic-eden-v2",
    "name": "Magic Eden",
    "type": "nft_marketplace",
    "capabilities": ["nft_listing", "nft_buying"],
    "endpoint": "https://api-mainnet.magiceden.dev/v2",
}


class FakeAgent:
    """Minimal object satisfying the Agent protocol"""

    def __init__(self, agent_id: str = "agent-1", capabilities: List[str] = None, name: str = "Fake Agent"):
        self.agent_id = agent_id
        self.capabilities = capabilities if capabilities is not None else ["Token Swaps"]
        self.name = name

    def get_name(self) -> str:
        return self.name

    def get_description(self) -> str:
        return "Test agent"

    def get_capabilities(self) -> List[str]:
        return list(self.capabilities)

    async def process_instruction(self, instruction: str):
        raise NotImplementedError

    async def execute_transaction(self, transaction: Any) -> str:
        raise NotImplementedError

    async def get_state(self) -> Dict[str, Any]:
        return {"agentId": self.agent_id}


@pytest.fixture
def jupiter_data() -> Dict[str, Any]:
    return json.loads(json.dumps(JUPITER))


@pytest.fixture
def jupiter(jupiter_data) -> ContextDefinition:
    return ContextDefinition.model_validate(jupiter_data)


@pytest.fixture
def magic_eden() -> ContextDefinition:
    return ContextDefinition.model_validate(MAGIC_EDEN)


@pytest.fixture
def fake_agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture
def router() -> ContextRouter:
    """Router with the default (deny) policy and simulated transport"""
    return ContextRouter()


@pytest.fixture
def open_router() -> ContextRouter:
    return ContextRouter(policy=AllowAllPolicy())


@pytest.fixture
def contexts_dir(tmp_path: Path, jupiter_data) -> Path:
    """Directory holding the Jupiter definition as YAML"""
    (tmp_path / "jupiter-dex.yaml").write_text(yaml.safe_dump(jupiter_data), encoding="utf-8")
    return tmp_path


@pytest.fixture
def defi_agent() -> SolanaDeFiAgent:
    return SolanaDeFiAgent("defi-agent-1")


@pytest.fixture
def nft_agent() -> NFTMarketAgent:
    return NFTMarketAgent("nft-agent-1")


@pytest_asyncio.fixture
async def loaded_router(contexts_dir) -> ContextRouter:
    router = ContextRouter(policy=AllowAllPolicy())
    await router.load_contexts(contexts_dir)
    return router
