"""
Token symbol resolution.

``SymbolResolver.resolve`` maps a symbol or mint to ``TokenInfo``: static table
first, then a DexScreener search (most liquid Solana pair wins). Dynamic results
are cached with a TTL; decimals for dynamically resolved mints are the
configured default and are never re-queried while cached.

``PriceFeedResolver`` maps a symbol to a CoinGecko coin id the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..cache import TTLCache
from ..config import settings
from ..core.errors import UnknownTokenError, UpstreamRejectedError, ValidationError
from ..providers.coingecko import CoingeckoProvider, get_coingecko_provider
from ..providers.dexscreener import DexScreenerProvider, get_dexscreener_provider, most_liquid

logger = logging.getLogger(__name__)

MINT_LENGTH = 44

SOL_MINT = "So11111111111111111111111111111111111111112"


@dataclass(frozen=True)
class TokenInfo:
    mint: str
    decimals: int
    symbol: Optional[str] = None


STATIC_TOKENS: Dict[str, TokenInfo] = {
    "SOL": TokenInfo(mint=SOL_MINT, decimals=9, symbol="SOL"),
    "USDC": TokenInfo(mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", decimals=6, symbol="USDC"),
    "USDT": TokenInfo(mint="Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", decimals=6, symbol="USDT"),
    "BONK": TokenInfo(mint="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", decimals=5, symbol="BONK"),
    "JUP": TokenInfo(mint="JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN", decimals=6, symbol="JUP"),
}

_STATIC_BY_MINT: Dict[str, TokenInfo] = {info.mint: info for info in STATIC_TOKENS.values()}

COINGECKO_IDS: Dict[str, str] = {
    "sol": "solana",
    "usdc": "usd-coin",
    "usdt": "tether",
    "bonk": "bonk",
    "jup": "jupiter-exchange-solana",
    "btc": "bitcoin",
    "eth": "ethereum",
    "matic": "matic-network",
    "avax": "avalanche-2",
    "atom": "cosmos",
    "dot": "polkadot",
    "ada": "cardano",
    "link": "chainlink",
    "uni": "uniswap",
    "aave": "aave",
    "crv": "curve-dao-token",
    "comp": "compound-governance-token",
    "snx": "havven",
    "mkr": "maker",
    "yfi": "yearn-finance",
}


def symbol_for_mint(mint: str) -> Optional[str]:
    info = _STATIC_BY_MINT.get(mint)
    return info.symbol if info else None


def _normalize(symbol_or_mint: object) -> str:
    if not isinstance(symbol_or_mint, str) or not symbol_or_mint.strip():
        raise ValidationError("Token symbol is required")
    return symbol_or_mint.strip()


class SymbolResolver:
    """Symbol or mint -> ``TokenInfo``, never partial."""

    def __init__(
        self,
        dexscreener: Optional[DexScreenerProvider] = None,
        cache: Optional[TTLCache] = None,
        default_decimals: Optional[int] = None,
    ):
        self._dexscreener = dexscreener
        self._cache = cache or TTLCache(
            default_ttl=settings.token_cache_ttl_seconds,
            max_size=settings.token_cache_max_size,
        )
        self.default_decimals = (
            settings.default_token_decimals if default_decimals is None else default_decimals
        )

    @property
    def dexscreener(self) -> DexScreenerProvider:
        if self._dexscreener is None:
            self._dexscreener = get_dexscreener_provider()
        return self._dexscreener

    async def resolve(self, symbol_or_mint: str) -> TokenInfo:
        value = _normalize(symbol_or_mint)

        # SOL's wrapped mint is 43 characters, so known mints are matched directly
        if value in _STATIC_BY_MINT:
            return _STATIC_BY_MINT[value]

        if len(value) == MINT_LENGTH:
            return TokenInfo(mint=value, decimals=self.default_decimals)

        upper = value.upper()
        if upper in STATIC_TOKENS:
            return STATIC_TOKENS[upper]

        cached = await self._cache.get(upper)
        if cached is not None:
            return cached

        info = await self._search(value)
        await self._cache.set(upper, info)
        await self._cache.set(info.mint, info)
        return info

    async def resolve_mint(self, symbol_or_mint: str) -> str:
        return (await self.resolve(symbol_or_mint)).mint

    async def _search(self, query: str) -> TokenInfo:
        try:
            pairs = await self.dexscreener.search_pairs(query)
        except UpstreamRejectedError as exc:
            raise UnknownTokenError(query, exc.message) from exc

        best = most_liquid(pairs)
        if best is None:
            raise UnknownTokenError(query, f'No tokens found for "{query}"')

        logger.info("Resolved %s to mint %s via DexScreener", query, best.base_address)
        return TokenInfo(
            mint=best.base_address,
            decimals=self.default_decimals,
            symbol=best.base_symbol or query.upper(),
        )

    async def clear_cache(self) -> None:
        await self._cache.clear()


class PriceFeedResolver:
    """Symbol -> CoinGecko coin id (static map, then CoinGecko search)."""

    def __init__(
        self,
        coingecko: Optional[CoingeckoProvider] = None,
        cache: Optional[TTLCache] = None,
    ):
        self._coingecko = coingecko
        self._cache = cache or TTLCache(
            default_ttl=settings.token_cache_ttl_seconds,
            max_size=settings.token_cache_max_size,
        )

    @property
    def coingecko(self) -> CoingeckoProvider:
        if self._coingecko is None:
            self._coingecko = get_coingecko_provider()
        return self._coingecko

    async def resolve(self, symbol: str) -> str:
        value = _normalize(symbol)
        key = value.lower()
        if key in COINGECKO_IDS:
            return COINGECKO_IDS[key]

        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        coins = await self.coingecko.search_coins(value)
        exact = [coin for coin in coins if str(coin.get("symbol", "")).lower() == key]
        match = (exact or coins or [None])[0]
        if not match or not match.get("id"):
            raise UnknownTokenError(value, "No price feed found")

        await self._cache.set(key, match["id"])
        return match["id"]


_symbol_resolver: Optional[SymbolResolver] = None
_price_feed_resolver: Optional[PriceFeedResolver] = None


def get_symbol_resolver() -> SymbolResolver:
    global _symbol_resolver
    if _symbol_resolver is None:
        _symbol_resolver = SymbolResolver()
    return _symbol_resolver


def get_price_feed_resolver() -> PriceFeedResolver:
    global _price_feed_resolver
    if _price_feed_resolver is None:
        _price_feed_resolver = PriceFeedResolver()
    return _price_feed_resolver
