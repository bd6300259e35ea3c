"""DexScreener pair search and spot prices for Solana tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..config import settings
from ..core.retry import RetryConfig
from .base import HttpProvider


@dataclass
class DexPair:
    """One trading pair as reported by DexScreener."""

    chain_id: str
    base_address: str
    base_symbol: str
    base_name: str
    price_usd: Optional[float]
    liquidity_usd: float

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DexPair":
        base = data.get("baseToken") or {}
        liquidity = data.get("liquidity") or {}
        price_raw = data.get("priceUsd")
        try:
            price = float(price_raw) if price_raw is not None else None
        except (TypeError, ValueError):
            price = None
        try:
            liquidity_usd = float(liquidity.get("usd") or 0)
        except (TypeError, ValueError):
            liquidity_usd = 0.0
        return cls(
            chain_id=data.get("chainId", ""),
            base_address=base.get("address", ""),
            base_symbol=base.get("symbol", ""),
            base_name=base.get("name", ""),
            price_usd=price,
            liquidity_usd=liquidity_usd,
        )


def most_liquid(pairs: List[DexPair]) -> Optional[DexPair]:
    """Pick the pair with the greatest reported USD liquidity."""
    if not pairs:
        return None
    return max(pairs, key=lambda pair: pair.liquidity_usd)


class DexScreenerProvider(HttpProvider):
    """Public DexScreener API; no key required, rate limited per IP."""

    name = "dexscreener"
    timeout_s = 15

    def __init__(self, base_url: Optional[str] = None, retry_config: Optional[RetryConfig] = None):
        super().__init__(retry_config)
        self.base_url = (base_url or settings.dexscreener_base_url).rstrip("/")

    async def search_pairs(self, query: str, chain_id: str = "solana") -> List[DexPair]:
        """Search pairs by token name, symbol or address, limited to ``chain_id``."""
        data = await self._request_json(
            "GET",
            f"{self.base_url}/latest/dex/search",
            params={"q": query},
            retry=True,
        )
        return self._parse_pairs(data, chain_id)

    async def get_token_pairs(self, mint_address: str, chain_id: str = "solana") -> List[DexPair]:
        """All pairs trading ``mint_address`` as base token."""
        data = await self._request_json(
            "GET",
            f"{self.base_url}/latest/dex/tokens/{mint_address}",
            retry=True,
        )
        return [
            pair
            for pair in self._parse_pairs(data, chain_id)
            if pair.base_address == mint_address
        ] or self._parse_pairs(data, chain_id)

    @staticmethod
    def _parse_pairs(data: Any, chain_id: str) -> List[DexPair]:
        raw_pairs = (data or {}).get("pairs") or []
        pairs = [DexPair.from_api(item) for item in raw_pairs if isinstance(item, dict)]
        return [pair for pair in pairs if pair.chain_id == chain_id and pair.base_address]


_dexscreener: Optional[DexScreenerProvider] = None


def get_dexscreener_provider() -> DexScreenerProvider:
    global _dexscreener
    if _dexscreener is None:
        _dexscreener = DexScreenerProvider()
    return _dexscreener
