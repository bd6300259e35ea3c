from ..core.errors import UnsupportedTokenError
from ..providers.solana_rpc import get_solana_rpc
from ..services.address import require_solana_address
from ..services.units import format_amount, from_base_units

SOL_DECIMALS = 9


async def get_balance(wallet_address: str, token_symbol: str = "SOL") -> str:
    """Native SOL balance of ``wallet_address`` as a sentence."""
    symbol = (token_symbol or "SOL").strip().upper()
    if symbol != "SOL":
        raise UnsupportedTokenError(f"Balance lookups currently support SOL only, not {token_symbol}.")

    address = require_solana_address(wallet_address, "wallet address")
    lamports = await get_solana_rpc().get_balance(address)
    balance = format_amount(from_base_units(lamports, SOL_DECIMALS))
    return f"Your SOL balance is {balance} SOL"
