from .balance import get_balance
from .contacts import add_contact, get_contact, get_contacts, remove_contact
from .history import get_transaction_history
from .portfolio import get_portfolio
from .prices import get_price_history, get_token_comparison, get_token_price
from .send import TransferInstruction, prepare_send
from .swap import SwapTransaction, swap_tokens
from .trigger_orders import (
    cancel_trigger_order,
    create_trigger_order,
    execute_trigger_order,
    get_trigger_orders,
)

__all__ = [
    "get_balance",
    "add_contact",
    "get_contact",
    "get_contacts",
    "remove_contact",
    "get_transaction_history",
    "get_portfolio",
    "get_price_history",
    "get_token_comparison",
    "get_token_price",
    "TransferInstruction",
    "prepare_send",
    "SwapTransaction",
    "swap_tokens",
    "cancel_trigger_order",
    "create_trigger_order",
    "execute_trigger_order",
    "get_trigger_orders",
]
