import asyncio
import logging
from typing import Dict

from ..providers.helius import get_helius_provider
from ..providers.jupiter import JupiterToken, get_jupiter_token_list
from ..services.address import require_solana_address
from ..services.units import format_amount

logger = logging.getLogger(__name__)

EMPTY_PORTFOLIO = "I couldn't find any tokens in your wallet."


async def get_portfolio(wallet_address: str) -> str:
    """Bulleted snapshot of native SOL plus every nonzero SPL balance."""
    address = require_solana_address(wallet_address, "wallet address")
    token_list = get_jupiter_token_list()

    balances, metadata = await asyncio.gather(
        get_helius_provider().get_balances(address),
        token_list.get_tokens_by_mint(),
        return_exceptions=True,
    )
    if isinstance(balances, BaseException):
        raise balances
    if isinstance(metadata, BaseException):
        logger.warning("Token metadata unavailable, showing raw symbols: %s", metadata)
        metadata = {}
    tokens_by_mint: Dict[str, JupiterToken] = metadata

    lines = []
    if balances.native_sol > 0:
        lines.append(f"* **SOL** (Solana): {format_amount(balances.native_sol)}")

    for holding in balances.tokens:
        if holding.amount <= 0:
            continue
        meta = tokens_by_mint.get(holding.mint)
        symbol = (meta.symbol if meta else None) or holding.symbol or holding.mint
        name = meta.name if meta else ""
        lines.append(f"* **{symbol}** ({name}): {format_amount(holding.amount)}")

    if not lines:
        return EMPTY_PORTFOLIO
    return "📊 Here's a snapshot of your portfolio:\n\n" + "\n".join(lines)
