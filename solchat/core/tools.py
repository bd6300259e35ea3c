"""
Tool Registry for LLM-driven tool calling.

Each registered tool carries its manifest entry (name, description,
parameters), an async handler, whether the caller's wallet is injected, and the
family that decides which wire events its result becomes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Coroutine, Dict, List, Optional

from .errors import ValidationError
from ..providers.llm.base import ToolCall, ToolDefinition, ToolParameter, ToolParameterType
from ..tools import balance, contacts, history, portfolio, prices, send, swap, trigger_orders


class ToolFamily(str, Enum):
    """How a tool's result is rendered on the wire."""

    TEXT = "text"
    TRANSFER = "transfer"
    SWAP = "swap"
    TRIGGER_CREATE = "trigger_create"
    TRIGGER_CANCEL = "trigger_cancel"
    CHART = "chart"


@dataclass
class ToolContext:
    """Per-request facts handlers may rely on."""

    wallet_address: str
    turn_id: str = ""


Handler = Callable[[Dict[str, Any], ToolContext], Coroutine[Any, Any, Any]]


@dataclass
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    handler: Handler
    family: ToolFamily = ToolFamily.TEXT
    requires_address: bool = False


def _string(name: str, description: str, required: bool = True) -> ToolParameter:
    return ToolParameter(name=name, type=ToolParameterType.STRING, description=description, required=required)


def _number(name: str, description: str, required: bool = True) -> ToolParameter:
    return ToolParameter(name=name, type=ToolParameterType.NUMBER, description=description, required=required)


def _integer(name: str, description: str, required: bool = False) -> ToolParameter:
    return ToolParameter(name=name, type=ToolParameterType.INTEGER, description=description, required=required)


class ToolRegistry:
    """
    Registry of available tools that the LLM can call.

    Each tool has a definition (name, description, parameters) and a handler function.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._tools: Dict[str, RegisteredTool] = {}
        self.logger = logger or logging.getLogger(__name__)
        self._register_default_tools()

    def register(
        self,
        name: str,
        definition: ToolDefinition,
        handler: Handler,
        family: ToolFamily = ToolFamily.TEXT,
        requires_address: bool = False,
    ) -> None:
        """Register a tool with its definition and handler."""
        self._tools[name] = RegisteredTool(
            definition=definition,
            handler=handler,
            family=family,
            requires_address=requires_address,
        )

    def get_definitions(self) -> List[ToolDefinition]:
        """Get all tool definitions for passing to the LLM."""
        return [tool.definition for tool in self._tools.values()]

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        """Get a registered tool by name."""
        return self._tools.get(name)

    async def execute(self, call: ToolCall, context: ToolContext) -> Any:
        """Run a registered tool. Handler exceptions propagate to the caller."""
        tool = self._tools[call.name]
        if tool.requires_address and not context.wallet_address:
            raise ValidationError(f"{call.name} needs a connected wallet address")
        return await tool.handler(dict(call.arguments or {}), context)

    def _register_default_tools(self) -> None:
        """Register the default set of tools."""

        # Balance and history
        self.register(
            "getBalance",
            ToolDefinition(
                name="getBalance",
                description=(
                    "Get the balance of the connected wallet for a token. "
                    "Only SOL is supported."
                ),
                parameters=[_string("tokenSymbol", "Token symbol, e.g. SOL")],
            ),
            self._handle_get_balance,
            requires_address=True,
        )
        self.register(
            "getTransactionHistory",
            ToolDefinition(
                name="getTransactionHistory",
                description="Get recent transaction history for the connected wallet.",
                parameters=[_integer("limit", "Number of recent transactions (default 5)")],
            ),
            self._handle_get_transaction_history,
            requires_address=True,
        )
        self.register(
            "getPortfolio",
            ToolDefinition(
                name="getPortfolio",
                description="Get all tokens and balances in the connected wallet.",
            ),
            self._handle_get_portfolio,
            requires_address=True,
        )

        # Value-moving tools (client signs)
        self.register(
            "send",
            ToolDefinition(
                name="send",
                description=(
                    "Send SOL to another wallet. The recipient may be a wallet address "
                    "or the name of a saved contact."
                ),
                parameters=[
                    _string("toAddress", "Recipient wallet address or saved contact name"),
                    _number("amount", "Amount to send"),
                    _string("tokenSymbol", "Token symbol to send (SOL)"),
                ],
            ),
            self._handle_send,
            family=ToolFamily.TRANSFER,
            requires_address=True,
        )
        self.register(
            "swapTokens",
            ToolDefinition(
                name="swapTokens",
                description="Swap one token for another on Solana via the Jupiter aggregator.",
                parameters=[
                    _string("fromToken", "Token to sell, symbol or mint (default SOL when buying)", required=False),
                    _string("toToken", "Token to buy, symbol or mint"),
                    _number("amount", "Amount of fromToken to swap"),
                ],
            ),
            self._handle_swap_tokens,
            family=ToolFamily.SWAP,
            requires_address=True,
        )

        # Trigger orders
        self.register(
            "createTriggerOrder",
            ToolDefinition(
                name="createTriggerOrder",
                description=(
                    "Create a price trigger (limit) order: sell makerAmount of fromToken "
                    "once takerAmount of toToken can be received."
                ),
                parameters=[
                    _string("fromToken", "Token to sell, symbol or mint"),
                    _string("toToken", "Token to buy, symbol or mint"),
                    _number("makerAmount", "Amount of fromToken to sell"),
                    _number("takerAmount", "Amount of toToken to receive"),
                    _integer("slippageBps", "Slippage tolerance in basis points"),
                    _integer("expiry", "Expiry as a unix timestamp in seconds"),
                ],
            ),
            self._handle_create_trigger_order,
            family=ToolFamily.TRIGGER_CREATE,
            requires_address=True,
        )
        self.register(
            "executeTriggerOrder",
            ToolDefinition(
                name="executeTriggerOrder",
                description="Submit a signed trigger order transaction for execution.",
                parameters=[
                    _string("signedTransaction", "Signed transaction, base64 encoded"),
                    _string("requestId", "Request id returned when the order was created", required=False),
                    _string("orderId", "Order id, for display", required=False),
                ],
            ),
            self._handle_execute_trigger_order,
        )
        self.register(
            "cancelTriggerOrder",
            ToolDefinition(
                name="cancelTriggerOrder",
                description="Cancel an existing trigger order of the connected wallet.",
                parameters=[_string("orderId", "Order id to cancel")],
            ),
            self._handle_cancel_trigger_order,
            family=ToolFamily.TRIGGER_CANCEL,
            requires_address=True,
        )
        self.register(
            "getTriggerOrders",
            ToolDefinition(
                name="getTriggerOrders",
                description="List the active trigger orders of the connected wallet.",
            ),
            self._handle_get_trigger_orders,
            requires_address=True,
        )

        # Market data
        self.register(
            "getTokenPrice",
            ToolDefinition(
                name="getTokenPrice",
                description="Get the current USD price of a token.",
                parameters=[_string("tokenSymbol", "Token symbol, name or mint, e.g. SOL")],
            ),
            self._handle_get_token_price,
        )
        self.register(
            "getPriceHistory",
            ToolDefinition(
                name="getPriceHistory",
                description="Chart the USD price history of a token over the last N days.",
                parameters=[
                    _string("tokenSymbol", "Token symbol, e.g. SOL"),
                    _integer("days", "Number of days (default 7)"),
                ],
            ),
            self._handle_get_price_history,
            family=ToolFamily.CHART,
        )
        self.register(
            "getTokenComparison",
            ToolDefinition(
                name="getTokenComparison",
                description="Compare the percent price change of two tokens over the last N days.",
                parameters=[
                    _string("token1", "First token symbol"),
                    _string("token2", "Second token symbol"),
                    _integer("days", "Number of days (default 7)"),
                ],
            ),
            self._handle_get_token_comparison,
            family=ToolFamily.CHART,
        )

        # Contact book
        self.register(
            "addContact",
            ToolDefinition(
                name="addContact",
                description="Save a contact name for a wallet address.",
                parameters=[
                    _string("name", "Contact name"),
                    _string("address", "Solana wallet address"),
                ],
            ),
            self._handle_add_contact,
        )
        self.register(
            "removeContact",
            ToolDefinition(
                name="removeContact",
                description="Remove a saved contact.",
                parameters=[_string("name", "Contact name")],
            ),
            self._handle_remove_contact,
        )
        self.register(
            "getContact",
            ToolDefinition(
                name="getContact",
                description="Look up the address saved for a contact name.",
                parameters=[_string("name", "Contact name")],
            ),
            self._handle_get_contact,
        )
        self.register(
            "getContacts",
            ToolDefinition(name="getContacts", description="List all saved contacts."),
            self._handle_get_contacts,
        )

    # =========================================================================
    # Tool Handlers
    # =========================================================================

    async def _handle_get_balance(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await balance.get_balance(context.wallet_address, args.get("tokenSymbol") or "SOL")

    async def _handle_get_transaction_history(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await history.get_transaction_history(context.wallet_address, args.get("limit"))

    async def _handle_get_portfolio(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await portfolio.get_portfolio(context.wallet_address)

    async def _handle_send(self, args: Dict[str, Any], context: ToolContext) -> send.TransferInstruction:
        return await send.prepare_send(
            from_address=context.wallet_address,
            to_address=args.get("toAddress"),
            amount=args.get("amount"),
            token_symbol=args.get("tokenSymbol"),
        )

    async def _handle_swap_tokens(self, args: Dict[str, Any], context: ToolContext) -> swap.SwapTransaction:
        return await swap.swap_tokens(
            wallet_address=context.wallet_address,
            to_token=args.get("toToken"),
            amount=args.get("amount"),
            from_token=args.get("fromToken"),
        )

    async def _handle_create_trigger_order(self, args: Dict[str, Any], context: ToolContext):
        return await trigger_orders.create_trigger_order(
            wallet_address=context.wallet_address,
            from_token=args.get("fromToken"),
            to_token=args.get("toToken"),
            maker_amount=args.get("makerAmount"),
            taker_amount=args.get("takerAmount"),
            slippage_bps=args.get("slippageBps"),
            expiry=args.get("expiry"),
        )

    async def _handle_execute_trigger_order(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await trigger_orders.execute_trigger_order(
            signed_transaction=args.get("signedTransaction"),
            request_id=args.get("requestId"),
            order_id=args.get("orderId"),
        )

    async def _handle_cancel_trigger_order(self, args: Dict[str, Any], context: ToolContext):
        return await trigger_orders.cancel_trigger_order(context.wallet_address, args.get("orderId"))

    async def _handle_get_trigger_orders(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await trigger_orders.get_trigger_orders(context.wallet_address)

    async def _handle_get_token_price(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await prices.get_token_price(args.get("tokenSymbol"))

    async def _handle_get_price_history(self, args: Dict[str, Any], context: ToolContext):
        return await prices.get_price_history(args.get("tokenSymbol"), args.get("days"))

    async def _handle_get_token_comparison(self, args: Dict[str, Any], context: ToolContext):
        return await prices.get_token_comparison(args.get("token1"), args.get("token2"), args.get("days"))

    async def _handle_add_contact(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await contacts.add_contact(args.get("name"), args.get("address"))

    async def _handle_remove_contact(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await contacts.remove_contact(args.get("name"))

    async def _handle_get_contact(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await contacts.get_contact(args.get("name"))

    async def _handle_get_contacts(self, args: Dict[str, Any], context: ToolContext) -> str:
        return await contacts.get_contacts()


_registry: Optional[ToolRegistry] = None


def get_tool_registry() -> ToolRegistry:
    global _registry
    if _registry is None:
        _registry = ToolRegistry()
    return _registry
