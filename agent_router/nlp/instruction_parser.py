"""
Keyword and pattern based instruction parsing.

Turns free text such as "swap 2 SOL to USDC" into a ParsedInstruction with an
action tag, extracted parameters and a confidence score. Pure functions only:
the same text always yields the same result.
"""

import re
from typing import Any, Dict, Optional, Pattern, Union

from agent_router.core.models import ParsedInstruction

DEFAULT_SOURCE_TOKEN = "SOL"
DEFAULT_TARGET_TOKEN = "USDC"
DEFAULT_SLIPPAGE_BPS = 50  # 0.5%

NUMBER = r"(\d+(?:\.\d+)?)"

_SWAP_WORDS = re.compile(r"\b(swap|exchange|trade)\b", re.IGNORECASE)
_LIQUIDITY_WORDS = re.compile(r"\b(add|provide)\s+liquidity\b", re.IGNORECASE)
_MINT_WORDS = re.compile(r"\bmint\b", re.IGNORECASE)
_LIST_WORDS = re.compile(r"\b(list|sell)\b", re.IGNORECASE)
_BUY_WORDS = re.compile(r"\b(buy|purchase)\b", re.IGNORECASE)
_COLLECTION_WORDS = re.compile(r"\bcollection\b", re.IGNORECASE)
_PRICE_WORDS = re.compile(r"\b(price|value|worth)\b", re.IGNORECASE)
_NFT_WORD = re.compile(r"\bnfts?\b", re.IGNORECASE)

# Words that follow "pool" / "nft" without being an identifier
_FILLER = r"(?!(?:with|and|of|for|on|at|to|using)\b)"

AMOUNT_WITH_TOKEN = re.compile(NUMBER + r"\s+([A-Za-z]\w*)", re.IGNORECASE)

SWAP_PATTERNS = {
    "sourceToken": re.compile(r"\bfrom\s+(\w+)", re.IGNORECASE),
    "targetToken": re.compile(r"\b(?:to|into|for)\s+([A-Za-z]\w*)", re.IGNORECASE),
    "amount": re.compile(NUMBER),
}

LIQUIDITY_PATTERNS = {
    "poolId": re.compile(r"\bpool\s+" + _FILLER + r"([\w/-]+)", re.IGNORECASE),
    "poolPair": re.compile(r"([\w/-]+)\s+pool\b", re.IGNORECASE),
}

MINT_PATTERNS = {
    "name": re.compile(r"\bnamed\s+(.+?)(?=\s+with\b|\s+using\b|\s+symbol\b|$)", re.IGNORECASE),
    "symbol": re.compile(r"\bsymbol\s+(\w+)", re.IGNORECASE),
    "metadataUri": re.compile(r"(https?://\S+|ar://\S+|ipfs://\S+)", re.IGNORECASE),
}

LIST_PATTERNS = {
    "nftMint": re.compile(r"\bnft\s+" + _FILLER + r"(\w+)", re.IGNORECASE),
    "price": re.compile(r"\bfor\s+" + NUMBER, re.IGNORECASE),
    "marketplace": re.compile(r"\bon\s+([A-Za-z][\w ]*?)\s*[.!]?$", re.IGNORECASE),
}

BUY_PATTERNS = {
    "nftMint": re.compile(r"\bnft\s+" + _FILLER + r"(\w+)", re.IGNORECASE),
    "maxPrice": re.compile(NUMBER + r"\s*sol\b", re.IGNORECASE),
}

COLLECTION_PATTERNS = {
    "collectionAddress": re.compile(r"\bcollection\s+(\w+)", re.IGNORECASE),
}

PRICE_PATTERNS = {
    "token": re.compile(r"\bprice\s+of\s+(\w+)", re.IGNORECASE),
}

CONTEXT_HINT = re.compile(r"\bvia\s+([\w-]+)", re.IGNORECASE)


def extract_parameters(
    instruction: str,
    parameter_patterns: Dict[str, Union[str, Pattern[str]]],
) -> Dict[str, Any]:
    """
    Extract named parameters from text.

    Args:
        instruction: Text to search
        parameter_patterns: Parameter name -> regex whose first group is the value

    Returns:
        Only the parameters whose pattern matched with a non-empty first group
    """
    params: Dict[str, Any] = {}

    for param_name, pattern in parameter_patterns.items():
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.IGNORECASE)
        match = pattern.search(instruction)
        if match and match.groups() and match.group(1):
            params[param_name] = match.group(1).strip()

    return params


def _token(symbol: Optional[str], default: str) -> str:
    return symbol.upper() if symbol else default


def _parse_swap(text: str) -> ParsedInstruction:
    found = extract_parameters(text, SWAP_PATTERNS)

    # "swap 2 SOL to USDC": the token after the amount is the source
    amount_token = AMOUNT_WITH_TOKEN.search(text)
    source = found.get("sourceToken") or (amount_token.group(2) if amount_token else None)

    return ParsedInstruction(
        action="swap",
        params={
            "sourceToken": _token(source, DEFAULT_SOURCE_TOKEN),
            "targetToken": _token(found.get("targetToken"), DEFAULT_TARGET_TOKEN),
            "amount": found.get("amount", "1.0"),
            "slippageBps": DEFAULT_SLIPPAGE_BPS,
        },
        confidence=0.85,
    )


def _parse_liquidity(text: str) -> ParsedInstruction:
    found = extract_parameters(text, LIQUIDITY_PATTERNS)
    deposits = AMOUNT_WITH_TOKEN.findall(text)
    amount_a, token_a = deposits[0] if len(deposits) > 0 else ("1.0", DEFAULT_SOURCE_TOKEN)
    amount_b, token_b = deposits[1] if len(deposits) > 1 else ("10.0", DEFAULT_TARGET_TOKEN)

    return ParsedInstruction(
        action="addLiquidity",
        params={
            "poolId": found.get("poolId") or found.get("poolPair") or "default",
            "tokenA": token_a.upper(),
            "amountA": amount_a,
            "tokenB": token_b.upper(),
            "amountB": amount_b,
        },
        confidence=0.8,
    )


def _parse_mint(text: str) -> ParsedInstruction:
    params = extract_parameters(text, MINT_PATTERNS)
    if "metadataUri" in params:
        params["metadataUri"] = params["metadataUri"].rstrip(".,;)")
    return ParsedInstruction(action="mintNFT", params=params, confidence=0.85)


def _parse_list(text: str) -> ParsedInstruction:
    return ParsedInstruction(
        action="listNFT",
        params=extract_parameters(text, LIST_PATTERNS),
        confidence=0.85,
    )


def _parse_buy(text: str) -> ParsedInstruction:
    return ParsedInstruction(
        action="buyNFT",
        params=extract_parameters(text, BUY_PATTERNS),
        confidence=0.85,
    )


def _parse_collection(text: str) -> ParsedInstruction:
    return ParsedInstruction(
        action="checkCollection",
        params=extract_parameters(text, COLLECTION_PATTERNS),
        confidence=0.9,
    )


def _parse_price(text: str) -> ParsedInstruction:
    found = extract_parameters(text, PRICE_PATTERNS)
    return ParsedInstruction(
        action="checkPrice",
        params={"token": _token(found.get("token"), DEFAULT_SOURCE_TOKEN)},
        confidence=0.9,
    )


def parse_instruction(instruction: str) -> ParsedInstruction:
    """
    Parse a natural language instruction into a structured action.

    Rules are tried in a fixed order and the first one that applies wins, so
    "check collection X floor price" is a collection check, not a price check.

    Args:
        instruction: Free text from a user or upstream planner

    Returns:
        ParsedInstruction; action is 'unknown' with confidence 0.3 when no rule applies
    """
    text = " ".join(instruction.split())

    if _SWAP_WORDS.search(text):
        parsed = _parse_swap(text)
    elif _LIQUIDITY_WORDS.search(text):
        parsed = _parse_liquidity(text)
    elif _MINT_WORDS.search(text):
        parsed = _parse_mint(text)
    elif _LIST_WORDS.search(text) and _NFT_WORD.search(text):
        parsed = _parse_list(text)
    elif _BUY_WORDS.search(text):
        parsed = _parse_buy(text)
    elif _COLLECTION_WORDS.search(text):
        parsed = _parse_collection(text)
    elif _PRICE_WORDS.search(text):
        parsed = _parse_price(text)
    else:
        return ParsedInstruction(action="unknown", params={}, confidence=0.3)

    hint = CONTEXT_HINT.search(text)
    if hint:
        parsed.context = hint.group(1).lower()
    return parsed
