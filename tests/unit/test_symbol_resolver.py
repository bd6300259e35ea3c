"""
Tests for SymbolResolver and PriceFeedResolver.

Covers:
- Static table lookups (symbol, case, mint)
- 44-character mint passthrough
- DexScreener fallback and caching
- Unknown tokens
- CoinGecko id resolution
"""

import pytest

from solchat.core.errors import UnknownTokenError, UpstreamRejectedError, ValidationError
from solchat.providers.dexscreener import DexPair
from solchat.services.token_resolution import (
    SOL_MINT,
    STATIC_TOKENS,
    PriceFeedResolver,
    SymbolResolver,
    symbol_for_mint,
)

WIF_MINT = "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"


def _pair(address: str, symbol: str, liquidity: float, price: float = 1.0) -> DexPair:
    return DexPair(
        chain_id="solana",
        base_address=address,
        base_symbol=symbol,
        base_name=symbol.title(),
        price_usd=price,
        liquidity_usd=liquidity,
    )


class FakeDexScreener:
    def __init__(self, pairs=None, error=None):
        self.pairs = pairs or []
        self.error = error
        self.queries = []

    async def search_pairs(self, query, chain_id="solana"):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.pairs


class FakeCoingecko:
    def __init__(self, coins):
        self.coins = coins
        self.queries = []

    async def search_coins(self, query, *, limit=10):
        self.queries.append(query)
        return self.coins


# =============================================================================
# Static table
# =============================================================================

@pytest.mark.asyncio
async def test_static_symbols_resolve_case_insensitively():
    dex = FakeDexScreener()
    resolver = SymbolResolver(dexscreener=dex)

    for symbol in ("usdc", "USDC", " Usdc "):
        info = await resolver.resolve(symbol)
        assert info == STATIC_TOKENS["USDC"]
        assert info.decimals == 6

    assert dex.queries == []


@pytest.mark.asyncio
async def test_sol_mint_resolves_to_native_decimals():
    resolver = SymbolResolver(dexscreener=FakeDexScreener())

    info = await resolver.resolve(SOL_MINT)

    assert info.symbol == "SOL"
    assert info.decimals == 9


@pytest.mark.asyncio
async def test_44_character_input_is_treated_as_mint():
    dex = FakeDexScreener()
    resolver = SymbolResolver(dexscreener=dex, default_decimals=6)

    info = await resolver.resolve(WIF_MINT)

    assert info.mint == WIF_MINT
    assert info.decimals == 6
    assert dex.queries == []


def test_symbol_for_mint_only_knows_static_tokens():
    assert symbol_for_mint(STATIC_TOKENS["BONK"].mint) == "BONK"
    assert symbol_for_mint(WIF_MINT) is None


# =============================================================================
# Dynamic resolution
# =============================================================================

@pytest.mark.asyncio
async def test_dynamic_lookup_picks_most_liquid_pair_and_caches():
    dex = FakeDexScreener(pairs=[
        _pair("FakeWif1111111111111111111111111111111111111", "WIF", liquidity=1_000),
        _pair(WIF_MINT, "WIF", liquidity=5_000_000),
    ])
    resolver = SymbolResolver(dexscreener=dex, default_decimals=6)

    first = await resolver.resolve("wif")
    second = await resolver.resolve("WIF")

    assert first == second
    assert first.mint == WIF_MINT
    assert first.symbol == "WIF"
    assert first.decimals == 6
    assert dex.queries == ["wif"]


@pytest.mark.asyncio
async def test_clear_cache_forces_a_new_lookup():
    dex = FakeDexScreener(pairs=[_pair(WIF_MINT, "WIF", liquidity=10)])
    resolver = SymbolResolver(dexscreener=dex)

    await resolver.resolve("WIF")
    await resolver.clear_cache()
    await resolver.resolve("WIF")

    assert len(dex.queries) == 2


@pytest.mark.asyncio
async def test_no_pairs_raises_unknown_token():
    resolver = SymbolResolver(dexscreener=FakeDexScreener(pairs=[]))

    with pytest.raises(UnknownTokenError) as exc_info:
        await resolver.resolve("NOPE")

    assert exc_info.value.token == "NOPE"
    assert "NOPE" in exc_info.value.message


@pytest.mark.asyncio
async def test_rejected_search_becomes_unknown_token():
    dex = FakeDexScreener(error=UpstreamRejectedError("bad query", provider="dexscreener"))
    resolver = SymbolResolver(dexscreener=dex)

    with pytest.raises(UnknownTokenError):
        await resolver.resolve("???")


@pytest.mark.asyncio
async def test_blank_symbol_is_a_validation_error():
    resolver = SymbolResolver(dexscreener=FakeDexScreener())

    with pytest.raises(ValidationError):
        await resolver.resolve("   ")


@pytest.mark.asyncio
async def test_resolve_mint_returns_only_the_mint():
    resolver = SymbolResolver(dexscreener=FakeDexScreener())

    assert await resolver.resolve_mint("JUP") == STATIC_TOKENS["JUP"].mint


# =============================================================================
# Price feed ids
# =============================================================================

@pytest.mark.asyncio
async def test_price_feed_static_ids_skip_search():
    coingecko = FakeCoingecko(coins=[])
    resolver = PriceFeedResolver(coingecko=coingecko)

    assert await resolver.resolve("SOL") == "solana"
    assert await resolver.resolve("jup") == "jupiter-exchange-solana"
    assert coingecko.queries == []


@pytest.mark.asyncio
async def test_price_feed_prefers_exact_symbol_match():
    coingecko = FakeCoingecko(coins=[
        {"id": "dogwifhat-imposter", "symbol": "wifi"},
        {"id": "dogwifcoin", "symbol": "wif"},
    ])
    resolver = PriceFeedResolver(coingecko=coingecko)

    assert await resolver.resolve("WIF") == "dogwifcoin"
    assert await resolver.resolve("wif") == "dogwifcoin"
    assert coingecko.queries == ["WIF"]


@pytest.mark.asyncio
async def test_price_feed_without_results_raises():
    resolver = PriceFeedResolver(coingecko=FakeCoingecko(coins=[]))

    with pytest.raises(UnknownTokenError):
        await resolver.resolve("ZZZ")
