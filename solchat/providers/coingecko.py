from typing import Any, Dict, List, Optional

from ..config import settings
from ..core.retry import RetryConfig
from .base import HttpProvider


class CoingeckoProvider(HttpProvider):
    """Coingecko API provider for historical USD prices"""

    name = "coingecko"
    timeout_s = 15

    def __init__(self, retry_config: Optional[RetryConfig] = None):
        super().__init__(retry_config)
        self.api_key = settings.coingecko_api_key
        self.base_url = settings.coingecko_base_url.rstrip("/")

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def search_coins(self, query: str, *, limit: int = 10) -> List[Dict[str, Any]]:
        if not query:
            return []

        payload = await self._request_json(
            "GET",
            f"{self.base_url}/search",
            headers=self._build_headers(),
            params={"query": query},
            retry=True,
        )

        coins = payload.get("coins") or []
        if limit and limit > 0:
            return coins[:limit]
        return coins

    async def get_coin_market_chart(
        self,
        coin_id: str,
        *,
        vs_currency: str = "usd",
        days: int = 7,
    ) -> List[List[float]]:
        """Return ``[[timestamp_ms, price], ...]`` for the last ``days`` days."""
        payload = await self._request_json(
            "GET",
            f"{self.base_url}/coins/{coin_id}/market_chart",
            headers=self._build_headers(),
            params={"vs_currency": vs_currency, "days": str(days)},
            retry=True,
        )
        return payload.get("prices") or []


_coingecko: Optional[CoingeckoProvider] = None


def get_coingecko_provider() -> CoingeckoProvider:
    global _coingecko
    if _coingecko is None:
        _coingecko = CoingeckoProvider()
    return _coingecko
