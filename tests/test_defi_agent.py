"""Tests for the Solana DeFi agent"""

import pytest

from agent_router.agents import Agent, SimulatedSubmitter, SolanaDeFiAgent, create_agent
from agent_router.core.config import AgentsConfig
from agent_router.core.exceptions import TransactionError
from agent_router.core.models import ErrorCode, ParsedInstruction


def fixed_parser(action, params=None):
    def parse(text):
        return ParsedInstruction(action=action, params=params or {}, confidence=1.0)
    return parse


class TestMetadata:

    def test_name_and_capabilities(self, defi_agent):
        assert defi_agent.get_name() == "Solana DeFi Agent"
        capabilities = defi_agent.get_capabilities()
        assert "Token Swaps" in capabilities
        assert "Liquidity Provision" in capabilities
        assert len(capabilities) == 5

    def test_satisfies_protocol(self, defi_agent):
        assert isinstance(defi_agent, Agent)

    @pytest.mark.asyncio
    async def test_state(self, defi_agent):
        state = await defi_agent.get_state()

        assert state["agentId"] == "defi-agent-1"
        assert "Jupiter" in state["supportedDexes"]
        assert state["defaultSlippageBps"] == 50


class TestProcessInstruction:
    """Test instruction dispatch"""

    @pytest.mark.asyncio
    async def test_swap(self, defi_agent):
        result = await defi_agent.process_instruction("Swap 1 SOL to USDC")

        assert result.success is True
        assert "swap" in result.message
        assert result.message == "Simulated swap of 1 SOL to USDC with 0.5% slippage"
        assert result.data["sourceToken"] == "SOL"
        assert result.data["targetToken"] == "USDC"
        assert result.data["estimatedOutput"] == "123.45"

    @pytest.mark.asyncio
    async def test_swap_uses_default_slippage_when_unset(self):
        agent = SolanaDeFiAgent(
            "a", default_slippage_bps=100,
            parser=fixed_parser("swap", {"sourceToken": "SOL", "targetToken": "USDC", "amount": "2"}),
        )

        result = await agent.process_instruction("anything")

        assert result.data["slippageBps"] == 100
        assert "1.0% slippage" in result.message

    @pytest.mark.asyncio
    async def test_add_liquidity(self, defi_agent):
        result = await defi_agent.process_instruction("add liquidity to SOL/USDC pool with 1 SOL and 10 USDC")

        assert result.success is True
        assert "Added liquidity" in result.message
        assert result.data["tokenA"] == "SOL"
        assert result.data["tokenB"] == "USDC"
        assert result.data["lpTokens"] == "10.5"

    @pytest.mark.asyncio
    async def test_check_price(self, defi_agent):
        result = await defi_agent.process_instruction("what is the price of SOL")

        assert result.success is True
        assert result.data["token"] == "SOL"
        assert result.data["priceUsd"] == "1.23"

    @pytest.mark.asyncio
    async def test_unknown_action(self, defi_agent):
        result = await defi_agent.process_instruction("do something completely different")

        assert result.success is False
        assert result.error is not None
        assert result.error.code == 400

    @pytest.mark.asyncio
    async def test_nft_action_unsupported(self, defi_agent):
        result = await defi_agent.process_instruction("Buy NFT NFT123 for up to 12.5 SOL")

        assert result.error.code == ErrorCode.UNSUPPORTED_ACTION
        assert result.message == "Unsupported action: buyNFT"

    @pytest.mark.asyncio
    async def test_handler_exception_is_500(self):
        agent = SolanaDeFiAgent("a", parser=fixed_parser("swap", {}))

        result = await agent.process_instruction("swap")

        assert result.success is False
        assert result.error.code == 500
        assert result.message == "Failed to process instruction"
        assert result.error.message == "Missing parameter: sourceToken"

    @pytest.mark.asyncio
    async def test_parser_exception_is_500(self):
        def broken(text):
            raise RuntimeError("parser exploded")

        agent = SolanaDeFiAgent("a", parser=broken)
        result = await agent.process_instruction("swap")

        assert result.error.code == 500
        assert result.error.message == "parser exploded"


class TestExecuteTransaction:

    @pytest.mark.asyncio
    async def test_without_wallet(self, defi_agent):
        with pytest.raises(TransactionError, match="No wallet configured"):
            await defi_agent.execute_transaction({"ix": []})

    @pytest.mark.asyncio
    async def test_with_simulated_submitter(self):
        submitter = SimulatedSubmitter()
        agent = SolanaDeFiAgent("a", submitter=submitter)

        signature = await agent.execute_transaction({"ix": []})

        assert signature.startswith("sim-")
        assert submitter.submitted[0]["signature"] == signature


class TestCreateAgent:

    def test_from_config(self):
        agent = create_agent("defi", "x", config=AgentsConfig(supported_dexes=["Orca"], default_slippage_bps=75))

        assert isinstance(agent, SolanaDeFiAgent)
        assert agent.supported_dexes == ["Orca"]
        assert agent.default_slippage_bps == 75

    def test_generated_id(self):
        first = create_agent("defi")
        second = create_agent("defi")

        assert len(first.agent_id) == 32
        assert first.agent_id != second.agent_id

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_agent("lending")
