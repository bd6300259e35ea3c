from typing import Any

from ..config import settings
from ..core.errors import ValidationError
from ..providers.solana_rpc import get_solana_rpc
from ..services.address import require_solana_address, shorten

NO_TRANSACTIONS = "No recent transactions found for this address."

MAX_LIMIT = 50


async def get_transaction_history(wallet_address: str, limit: Any = None) -> str:
    """Most recent signatures for the wallet, linked to the explorer."""
    address = require_solana_address(wallet_address, "wallet address")
    if limit in (None, ""):
        count = settings.transaction_history_default_limit
    else:
        try:
            count = int(limit)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid limit: {limit}")
    count = max(1, min(count, MAX_LIMIT))

    signatures = await get_solana_rpc().get_signatures_for_address(address, limit=count)
    if not signatures:
        return NO_TRANSACTIONS

    lines = ["Here are your most recent transactions:", ""]
    for index, info in enumerate(signatures, start=1):
        marker = " (failed)" if info.err else ""
        lines.append(
            f"{index}. [{shorten(info.signature)}]({settings.explorer_tx_url}{info.signature}){marker}"
        )
    return "\n".join(lines)
