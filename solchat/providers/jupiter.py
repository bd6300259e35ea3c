"""
Jupiter providers for Solana.

- ``JupiterTokenList``: token metadata (symbol/name by mint), cached with a TTL.
- ``JupiterSwapProvider``: best-price quote and unsigned swap transaction.
- ``JupiterTriggerProvider``: trigger (limit) order lifecycle.

Nothing here signs: swap and trigger endpoints return unsigned base64
transactions that the user's wallet signs.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..cache import TTLCache
from ..config import settings
from ..core.errors import BuildError, NoRouteError, UpstreamRejectedError
from ..core.retry import RetryConfig
from .base import HttpProvider


@dataclass
class JupiterToken:
    """Parsed Jupiter token metadata."""

    address: str  # Mint address (Base58)
    symbol: str
    name: str
    decimals: int
    logo_uri: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "JupiterToken":
        return cls(
            address=data.get("address", ""),
            symbol=data.get("symbol", ""),
            name=data.get("name", ""),
            decimals=data.get("decimals", 9),
            logo_uri=data.get("logoURI"),
            tags=data.get("tags") or [],
        )


class JupiterTokenList(HttpProvider):
    """
    Token metadata lookup by mint address.

    The full list is fetched once and kept for ``token_metadata_ttl_seconds``;
    a failed refresh keeps serving the previous list.
    """

    name = "jupiter_tokens"
    timeout_s = 30

    _CACHE_KEY = "tokens_by_mint"

    def __init__(self, list_url: Optional[str] = None, ttl_seconds: Optional[int] = None) -> None:
        super().__init__()
        self.list_url = list_url or settings.jupiter_token_list_url
        self._cache = TTLCache(default_ttl=ttl_seconds or settings.token_metadata_ttl_seconds, max_size=1)
        self._stale: Dict[str, JupiterToken] = {}
        self._refresh_lock = asyncio.Lock()

    async def get_tokens_by_mint(self) -> Dict[str, JupiterToken]:
        cached = await self._cache.get(self._CACHE_KEY)
        if cached is not None:
            return cached

        async with self._refresh_lock:
            cached = await self._cache.get(self._CACHE_KEY)
            if cached is not None:
                return cached
            try:
                payload = await self._request_json("GET", self.list_url, retry=True)
            except Exception:
                # If refresh fails but we have stale data, keep using it
                if self._stale:
                    return self._stale
                raise

            tokens: Dict[str, JupiterToken] = {}
            for item in payload if isinstance(payload, list) else []:
                token = JupiterToken.from_api(item)
                if token.address:
                    tokens[token.address] = token

            self._stale = tokens
            await self._cache.set(self._CACHE_KEY, tokens)
            return tokens

    async def clear_cache(self) -> None:
        """Clear the token cache (useful for testing)."""
        await self._cache.clear()
        self._stale = {}


# =============================================================================
# Swap Quote and Transaction Building
# =============================================================================


@dataclass
class JupiterQuote:
    """Quote response from Jupiter."""
    input_mint: str
    output_mint: str
    in_amount: int                              # In smallest units
    out_amount: int                             # In smallest units
    slippage_bps: int
    price_impact_pct: float
    quote_response: Dict[str, Any]              # Raw response, echoed back to /swap


class JupiterSwapProvider(HttpProvider):
    """
    Jupiter Swap API provider.

    Usage:
        provider = JupiterSwapProvider()
        quote = await provider.get_swap_quote(input_mint, output_mint, amount=1_000_000_000)
        tx_base64 = await provider.build_swap_transaction(quote, user_public_key="...")
    """

    name = "jupiter_swap"
    timeout_s = 30

    def __init__(self, base_url: Optional[str] = None, retry_config: Optional[RetryConfig] = None):
        super().__init__(retry_config)
        self.base_url = (base_url or settings.jupiter_quote_api_url).rstrip("/")

    async def get_swap_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: Optional[int] = None,
    ) -> JupiterQuote:
        """
        Get the best-price route for ``amount`` base units of ``input_mint``.

        Raises:
            NoRouteError: the aggregator has no route for this pair/amount.
        """
        slippage = settings.swap_slippage_bps if slippage_bps is None else slippage_bps
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": slippage,
            "swapMode": "ExactIn",
        }

        try:
            data = await self._request_json("GET", f"{self.base_url}/quote", params=params, retry=True)
        except UpstreamRejectedError as exc:
            raise NoRouteError(f"No swap route found: {exc.message}", provider=self.name) from exc

        if not data.get("outAmount") or int(data["outAmount"]) <= 0 or not data.get("routePlan"):
            raise NoRouteError("No swap route found for this amount", provider=self.name)

        return JupiterQuote(
            input_mint=data.get("inputMint", input_mint),
            output_mint=data.get("outputMint", output_mint),
            in_amount=int(data.get("inAmount", amount)),
            out_amount=int(data["outAmount"]),
            slippage_bps=slippage,
            price_impact_pct=float(data.get("priceImpactPct") or 0),
            quote_response=data,
        )

    async def build_swap_transaction(self, quote: JupiterQuote, user_public_key: str) -> str:
        """
        Build an unsigned swap transaction for ``quote``.

        Returns:
            Base64 encoded versioned transaction.
        """
        payload = {
            "quoteResponse": quote.quote_response,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
            "prioritizationFeeLamports": {
                "priorityLevelWithMaxLamports": {
                    "maxLamports": 10_000_000,  # 0.01 SOL max
                    "priorityLevel": "medium",
                }
            },
        }

        try:
            data = await self._request_json("POST", f"{self.base_url}/swap", json=payload, retry=True)
        except UpstreamRejectedError as exc:
            raise BuildError(f"Failed to build swap transaction: {exc.message}", provider=self.name) from exc

        transaction = data.get("swapTransaction")
        if not transaction:
            raise BuildError("Failed to get swap transaction", provider=self.name)
        return transaction


# =============================================================================
# Trigger Orders
# =============================================================================


@dataclass
class TriggerOrderTransaction:
    """Unsigned transaction returned by create/cancel."""
    transaction: str
    request_id: Optional[str] = None
    order_id: Optional[str] = None


@dataclass
class TriggerOrder:
    order_id: str
    input_mint: str
    output_mint: str
    making_amount: str
    taking_amount: str
    status: str = "active"
    created_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TriggerOrder":
        return cls(
            order_id=data.get("orderKey") or data.get("order") or data.get("orderId") or "",
            input_mint=data.get("inputMint", ""),
            output_mint=data.get("outputMint", ""),
            making_amount=str(data.get("makingAmount") or data.get("rawMakingAmount") or "0"),
            taking_amount=str(data.get("takingAmount") or data.get("rawTakingAmount") or "0"),
            status=str(data.get("status") or "active"),
            created_at=data.get("createdAt"),
        )


class JupiterTriggerProvider(HttpProvider):
    """
    Jupiter Trigger API: conditional orders held by Jupiter until filled,
    executed or cancelled. 429/5xx responses are retried with linear backoff;
    validation failures (e.g. a malformed order id) surface immediately.
    """

    name = "jupiter_trigger"
    timeout_s = 30

    def __init__(self, base_url: Optional[str] = None, retry_config: Optional[RetryConfig] = None):
        super().__init__(retry_config)
        self.base_url = (base_url or settings.jupiter_trigger_api_url).rstrip("/")

    async def create_order(
        self,
        *,
        maker: str,
        input_mint: str,
        output_mint: str,
        making_amount: int,
        taking_amount: int,
        slippage_bps: int = 0,
        expired_at: Optional[int] = None,
    ) -> TriggerOrderTransaction:
        params: Dict[str, Any] = {
            "makingAmount": str(making_amount),
            "takingAmount": str(taking_amount),
            "slippageBps": str(slippage_bps),
        }
        if expired_at:
            params["expiredAt"] = str(expired_at)

        body = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "maker": maker,
            "payer": maker,
            "params": params,
            "computeUnitPrice": "auto",
            "wrapAndUnwrapSol": True,
        }
        data = await self._request_json("POST", f"{self.base_url}/createOrder", json=body, retry=True)

        transaction = data.get("transaction")
        if not transaction:
            raise BuildError("Trigger service returned no transaction", provider=self.name)
        return TriggerOrderTransaction(
            transaction=transaction,
            request_id=data.get("requestId"),
            order_id=data.get("order") or data.get("orderId"),
        )

    async def execute_order(self, signed_transaction: str, request_id: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"signedTransaction": signed_transaction}
        if request_id:
            body["requestId"] = request_id
        return await self._request_json("POST", f"{self.base_url}/execute", json=body, retry=True)

    async def cancel_order(self, *, maker: str, order_id: str) -> TriggerOrderTransaction:
        body = {"maker": maker, "order": order_id, "computeUnitPrice": "auto"}
        data = await self._request_json("POST", f"{self.base_url}/cancelOrder", json=body, retry=True)

        transaction = data.get("transaction")
        if not transaction:
            raise BuildError("Trigger service returned no cancellation transaction", provider=self.name)
        return TriggerOrderTransaction(
            transaction=transaction,
            request_id=data.get("requestId"),
            order_id=order_id,
        )

    async def get_orders(self, user: str, status: str = "active") -> List[TriggerOrder]:
        data = await self._request_json(
            "GET",
            f"{self.base_url}/getTriggerOrders",
            params={"user": user, "orderStatus": status},
            retry=True,
        )
        items = data.get("orders") if isinstance(data, dict) else data
        return [TriggerOrder.from_api(item) for item in items or [] if isinstance(item, dict)]


# Singleton instances
_token_list: Optional[JupiterTokenList] = None
_swap_provider: Optional[JupiterSwapProvider] = None
_trigger_provider: Optional[JupiterTriggerProvider] = None


def get_jupiter_token_list() -> JupiterTokenList:
    """Get the singleton Jupiter token list."""
    global _token_list
    if _token_list is None:
        _token_list = JupiterTokenList()
    return _token_list


def get_jupiter_swap_provider() -> JupiterSwapProvider:
    """Get the singleton Jupiter swap provider."""
    global _swap_provider
    if _swap_provider is None:
        _swap_provider = JupiterSwapProvider()
    return _swap_provider


def get_jupiter_trigger_provider() -> JupiterTriggerProvider:
    """Get the singleton Jupiter trigger provider."""
    global _trigger_provider
    if _trigger_provider is None:
        _trigger_provider = JupiterTriggerProvider()
    return _trigger_provider


__all__ = [
    "JupiterToken",
    "JupiterTokenList",
    "JupiterQuote",
    "JupiterSwapProvider",
    "TriggerOrder",
    "TriggerOrderTransaction",
    "JupiterTriggerProvider",
    "get_jupiter_token_list",
    "get_jupiter_swap_provider",
    "get_jupiter_trigger_provider",
]
