"""
Trigger (limit) order tools.

Create and cancel return unsigned transactions for the user's wallet; listing
keeps no local state. Retries for 429/5xx live in the provider.
"""

import logging
from typing import Any, Optional

from ..config import settings
from ..core.errors import ValidationError
from ..providers.jupiter import TriggerOrderTransaction, get_jupiter_trigger_provider
from ..services.address import require_solana_address, shorten
from ..services.token_resolution import get_symbol_resolver, symbol_for_mint
from ..services.units import to_base_units

logger = logging.getLogger(__name__)

NO_ACTIVE_ORDERS = "📭 You have no active trigger orders."


def _optional_int(value: Any, field: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value}")


async def create_trigger_order(
    wallet_address: str,
    from_token: Optional[str],
    to_token: Optional[str],
    maker_amount: Any,
    taker_amount: Any,
    slippage_bps: Any = None,
    expiry: Any = None,
) -> TriggerOrderTransaction:
    if not from_token or not to_token or maker_amount in (None, "") or taker_amount in (None, ""):
        raise ValidationError(
            "Missing required fields: fromToken, toToken, makerAmount and takerAmount are required."
        )

    maker = require_solana_address(wallet_address, "wallet address")
    resolver = get_symbol_resolver()
    source = await resolver.resolve(from_token)
    target = await resolver.resolve(to_token)

    order = await get_jupiter_trigger_provider().create_order(
        maker=maker,
        input_mint=source.mint,
        output_mint=target.mint,
        making_amount=to_base_units(maker_amount, source.decimals),
        taking_amount=to_base_units(taker_amount, target.decimals),
        slippage_bps=_optional_int(slippage_bps, "slippageBps") or 0,
        expired_at=_optional_int(expiry, "expiry"),
    )
    logger.info("Created trigger order %s for %s", order.order_id, maker)
    return order


async def execute_trigger_order(
    signed_transaction: Optional[str],
    request_id: Optional[str] = None,
    order_id: Optional[str] = None,
) -> str:
    if not signed_transaction:
        raise ValidationError("A signed transaction is required to execute a trigger order.")

    result = await get_jupiter_trigger_provider().execute_order(signed_transaction, request_id)

    message = "🚀 Trigger order executed"
    if order_id:
        message += f": Order ID {order_id}"
    signature = result.get("signature") if isinstance(result, dict) else None
    if signature:
        message += f"\n\n[View on Solscan]({settings.explorer_tx_url}{signature})"
    return message


async def cancel_trigger_order(wallet_address: str, order_id: Optional[str]) -> TriggerOrderTransaction:
    if not order_id or not str(order_id).strip():
        raise ValidationError("An order ID is required to cancel a trigger order.")

    maker = require_solana_address(wallet_address, "wallet address")
    return await get_jupiter_trigger_provider().cancel_order(maker=maker, order_id=str(order_id).strip())


async def get_trigger_orders(wallet_address: str) -> str:
    user = require_solana_address(wallet_address, "wallet address")
    orders = await get_jupiter_trigger_provider().get_orders(user)
    if not orders:
        return NO_ACTIVE_ORDERS

    lines = ["📋 Your active trigger orders:", ""]
    for index, order in enumerate(orders, start=1):
        sell = symbol_for_mint(order.input_mint) or shorten(order.input_mint, 4, 4)
        buy = symbol_for_mint(order.output_mint) or shorten(order.output_mint, 4, 4)
        lines.append(
            f"{index}. `{order.order_id}`: sell {order.making_amount} {sell} for "
            f"{order.taking_amount} {buy} ({order.status})"
        )
    return "\n".join(lines)
