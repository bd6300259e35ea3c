import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..core.errors import ValidationError
from ..providers.jupiter import JupiterQuote, get_jupiter_swap_provider
from ..services.address import require_solana_address
from ..services.token_resolution import TokenInfo, get_symbol_resolver
from ..services.units import to_base_units

logger = logging.getLogger(__name__)


@dataclass
class SwapTransaction:
    base64_tx: str
    from_token: TokenInfo
    to_token: TokenInfo
    quote: JupiterQuote


async def swap_tokens(
    wallet_address: str,
    to_token: Optional[str],
    amount: Any,
    from_token: Optional[str] = None,
) -> SwapTransaction:
    """
    Quote and build an unsigned swap of ``amount`` ``from_token`` into ``to_token``.

    Raises:
        NoRouteError: no route exists for the pair and amount.
        BuildError: the aggregator could not produce a transaction.
    """
    if not to_token or amount in (None, ""):
        raise ValidationError("Missing required fields: toToken and amount are required.")

    owner = require_solana_address(wallet_address, "wallet address")
    resolver = get_symbol_resolver()
    source = await resolver.resolve(from_token or "SOL")
    target = await resolver.resolve(to_token)
    if source.mint == target.mint:
        raise ValidationError("Cannot swap a token for itself.")

    base_units = to_base_units(amount, source.decimals)

    provider = get_jupiter_swap_provider()
    quote = await provider.get_swap_quote(source.mint, target.mint, base_units)
    transaction = await provider.build_swap_transaction(quote, owner)

    logger.info(
        "Built swap %s -> %s for %d base units (out %d)",
        source.mint,
        target.mint,
        base_units,
        quote.out_amount,
    )
    return SwapTransaction(base64_tx=transaction, from_token=source, to_token=target, quote=quote)
