import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..core.errors import ValidationError
from ..services.address import is_valid_solana_address, require_solana_address
from ..services.contacts import get_contact_book
from ..services.units import to_decimal

logger = logging.getLogger(__name__)


@dataclass
class TransferInstruction:
    """Arguments for a transfer the client builds and signs itself."""

    to_address: str
    amount: float
    token_symbol: str
    contact_name: Optional[str] = None


async def prepare_send(
    from_address: Optional[str],
    to_address: Optional[str],
    amount: Any,
    token_symbol: Optional[str],
) -> TransferInstruction:
    """
    Validate a native transfer and resolve the recipient.

    ``to_address`` may be a saved contact name; it is looked up
    case-insensitively before being treated as an address. Nothing is built or
    signed here.
    """
    if not from_address or not to_address or amount in (None, "") or not token_symbol:
        raise ValidationError("Missing required fields: toAddress, amount and tokenSymbol are required.")

    if str(token_symbol).strip().upper() != "SOL":
        raise ValidationError("This agent currently only supports sending SOL.")

    require_solana_address(from_address, "wallet address")

    value = to_decimal(amount)
    if value <= 0:
        raise ValidationError("Amount must be greater than zero")

    recipient = str(to_address).strip()
    contact_name: Optional[str] = None
    saved = get_contact_book().get(recipient)
    if saved:
        contact_name = recipient
        recipient = saved
    elif not is_valid_solana_address(recipient):
        raise ValidationError(
            f"Unknown recipient: {to_address}. Use a wallet address or a saved contact name."
        )

    logger.info("Prepared transfer of %s SOL to %s", value, recipient)
    return TransferInstruction(
        to_address=recipient,
        amount=float(value),
        token_symbol="SOL",
        contact_name=contact_name,
    )
