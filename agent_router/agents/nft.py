"""Agent for simulated NFT marketplace operations"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from agent_router.agents.base import (
    ActionHandler,
    BaseAgent,
    InstructionParser,
    TransactionSubmitter,
    require_param,
)
from agent_router.core.models import AgentResponse, utc_timestamp

BPS_DENOMINATOR = Decimal(10000)


def _to_decimal(value: Any, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid {field}: {value!r}") from None


class NFTMarketAgent(BaseAgent):
    """Lists, buys, mints and inspects NFTs across configured marketplaces"""

    def __init__(
        self,
        agent_id: str,
        supported_marketplaces: Optional[List[str]] = None,
        default_royalty_bps: int = 500,
        parser: Optional[InstructionParser] = None,
        submitter: Optional[TransactionSubmitter] = None,
    ):
        super().__init__(agent_id, parser=parser, submitter=submitter)
        self.supported_marketplaces = list(supported_marketplaces or ["Magic Eden", "Tensor"])
        self.default_royalty_bps = default_royalty_bps

    def get_name(self) -> str:
        return "Solana NFT Market Agent"

    def get_description(self) -> str:
        return ("An agent specialized for NFT operations on Solana, including buying, "
                "selling, minting, and tracking collections.")

    def get_capabilities(self) -> List[str]:
        return [
            "NFT Listing",
            "NFT Buying",
            "Collection Tracking",
            "Rarity Checking",
            "Minting New NFTs",
            "Royalty Payments",
        ]

    def actions(self) -> Dict[str, ActionHandler]:
        return {
            "listNFT": self._list_nft,
            "buyNFT": self._buy_nft,
            "checkCollection": self._check_collection,
            "mintNFT": self._mint_nft,
        }

    async def get_state(self) -> Dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "supportedMarketplaces": list(self.supported_marketplaces),
            "defaultRoyaltyBps": self.default_royalty_bps,
        }

    def _listing_fee(self, price: Any) -> str:
        fee = _to_decimal(price, "price") * self.default_royalty_bps / BPS_DENOMINATOR
        return f"{fee:.4f}"

    async def _list_nft(self, params: Dict[str, Any]) -> AgentResponse:
        nft_mint = require_param(params, "nftMint")
        price = require_param(params, "price")
        marketplace = params.get("marketplace") or self.supported_marketplaces[0]

        return AgentResponse.ok(
            message=f"Listed NFT {nft_mint} for {price} SOL on {marketplace}",
            data={
                "nftMint": nft_mint,
                "price": price,
                "marketplace": marketplace,
                "listingTime": utc_timestamp(),
                "fees": self._listing_fee(price),
            },
        )

    async def _buy_nft(self, params: Dict[str, Any]) -> AgentResponse:
        nft_mint = require_param(params, "nftMint")
        max_price = require_param(params, "maxPrice")
        return AgentResponse.ok(
            message=f"Purchased NFT {nft_mint} for {max_price} SOL",
            data={
                "nftMint": nft_mint,
                "pricePaid": max_price,
                "marketplace": self.supported_marketplaces[0],
                "purchaseTime": utc_timestamp(),
            },
        )

    async def _check_collection(self, params: Dict[str, Any]) -> AgentResponse:
        address = require_param(params, "collectionAddress")
        # Static figures until an indexer is connected
        return AgentResponse.ok(
            message=f"Information about collection {address}",
            data={
                "collectionAddress": address,
                "floorPrice": "10.5",
                "totalVolume": "1250.75",
                "items": 10000,
                "owners": 3500,
                "lastUpdated": utc_timestamp(),
            },
        )

    async def _mint_nft(self, params: Dict[str, Any]) -> AgentResponse:
        name = require_param(params, "name")
        symbol = require_param(params, "symbol")
        return AgentResponse.ok(
            message=f"Minted new NFT: {name} ({symbol})",
            data={
                "name": name,
                "symbol": symbol,
                "metadataUri": params.get("metadataUri"),
                "mintAddress": f"sim-mint-{self.agent_id[:8]}",
                "mintTime": utc_timestamp(),
                "owner": self.agent_id,
            },
        )
