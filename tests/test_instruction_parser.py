"""Tests for natural-language instruction parsing"""

import re

import pytest

from agent_router.nlp import extract_parameters, parse_instruction


class TestSwap:

    def test_amount_then_tokens(self):
        parsed = parse_instruction("Swap 1 SOL to USDC")

        assert parsed.action == "swap"
        assert parsed.params["sourceToken"] == "SOL"
        assert parsed.params["targetToken"] == "USDC"
        assert parsed.params["amount"] == "1"
        assert parsed.params["slippageBps"] == 50

    def test_from_keyword(self):
        parsed = parse_instruction("exchange 2.5 tokens from bonk into jup")

        assert parsed.params["sourceToken"] == "BONK"
        assert parsed.params["targetToken"] == "JUP"
        assert parsed.params["amount"] == "2.5"

    def test_defaults(self):
        parsed = parse_instruction("swap please")

        assert parsed.params["sourceToken"] == "SOL"
        assert parsed.params["targetToken"] == "USDC"


class TestLiquidity:

    def test_pool_pair_and_deposits(self):
        parsed = parse_instruction("add liquidity to SOL/USDC pool with 1 SOL and 10 USDC")

        assert parsed.action == "addLiquidity"
        assert parsed.params == {
            "poolId": "SOL/USDC",
            "tokenA": "SOL",
            "amountA": "1",
            "tokenB": "USDC",
            "amountB": "10",
        }

    def test_named_pool(self):
        parsed = parse_instruction("provide liquidity to pool raydium-42")
        assert parsed.params["poolId"] == "raydium-42"


class TestNFTActions:

    def test_mint(self):
        parsed = parse_instruction(
            "Mint a new NFT named Test NFT with symbol TEST using metadata at https://arweave.net/metadata.json"
        )

        assert parsed.action == "mintNFT"
        assert parsed.params["name"] == "Test NFT"
        assert parsed.params["symbol"] == "TEST"
        assert parsed.params["metadataUri"] == "https://arweave.net/metadata.json"

    def test_list(self):
        parsed = parse_instruction("List my NFT NFT123 for 10 SOL on Magic Eden")

        assert parsed.action == "listNFT"
        assert parsed.params == {"nftMint": "NFT123", "price": "10", "marketplace": "Magic Eden"}

    def test_list_requires_nft(self):
        assert parse_instruction("list my contexts").action == "unknown"

    def test_buy(self):
        parsed = parse_instruction("Buy NFT NFT123 for up to 12.5 SOL")

        assert parsed.action == "buyNFT"
        assert parsed.params == {"nftMint": "NFT123", "maxPrice": "12.5"}

    def test_collection_wins_over_price(self):
        parsed = parse_instruction("Check collection Collection123 floor price")

        assert parsed.action == "checkCollection"
        assert parsed.params["collectionAddress"] == "Collection123"


class TestPriceAndUnknown:

    def test_price(self):
        parsed = parse_instruction("What is the price of bonk?")

        assert parsed.action == "checkPrice"
        assert parsed.params == {"token": "BONK"}

    def test_unknown(self):
        parsed = parse_instruction("do something completely different")

        assert parsed.action == "unknown"
        assert parsed.params == {}
        assert parsed.confidence == pytest.approx(0.3)

    def test_context_hint(self):
        parsed = parse_instruction("swap 1 SOL to USDC via Jupiter")
        assert parsed.context == "jupiter"

    def test_deterministic(self):
        text = "Swap 3 SOL to USDC"
        assert parse_instruction(text) == parse_instruction(text)


class TestExtractParameters:

    def test_first_group_of_each_match(self):
        params = extract_parameters("pay 5 to alice", {
            "amount": re.compile(r"(\d+)"),
            "recipient": re.compile(r"to\s+(\w+)"),
            "memo": re.compile(r"memo\s+(\w+)"),
        })

        assert params == {"amount": "5", "recipient": "alice"}
