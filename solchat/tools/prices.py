"""
Spot prices (DexScreener) and historical series (CoinGecko).

History is charted in USD; comparisons are rebased to percent change from the
first point so two tokens overlay fairly.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from ..config import settings
from ..core.errors import NotFoundError, ValidationError
from ..providers.coingecko import get_coingecko_provider
from ..providers.dexscreener import get_dexscreener_provider, most_liquid
from ..services.token_resolution import get_price_feed_resolver, get_symbol_resolver
from ..types.events import ChartPayload, ChartSeries

COMPARISON_COLORS = ("#6366f1", "#ef4444")


def _days(value: Any) -> int:
    if value in (None, ""):
        return settings.price_history_default_days
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid days: {value}")
    if not 1 <= days <= 365:
        raise ValidationError("days must be between 1 and 365")
    return days


def _label(timestamp_ms: float, days: int) -> str:
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    if days <= 2:
        return moment.strftime("%b %d %H:%M")
    return moment.strftime("%b %d")


def normalize_prices(prices: Sequence[float]) -> List[float]:
    """Percent change of each price relative to the first one."""
    if not prices:
        return []
    first = prices[0]
    if not first:
        return [0.0 for _ in prices]
    return [((price - first) / first) * 100 for price in prices]


async def get_token_price(token_symbol: Optional[str]) -> str:
    if not token_symbol:
        raise ValidationError("tokenSymbol is required")

    token = await get_symbol_resolver().resolve(token_symbol)
    pair = most_liquid(await get_dexscreener_provider().get_token_pairs(token.mint))
    if pair is None or not pair.price_usd:
        raise NotFoundError(f"Price not found for {token_symbol}")

    symbol = pair.base_symbol or token.symbol or token_symbol.upper()
    return f"💰 The current price of {symbol} is ${pair.price_usd:.6f}."


async def _market_chart(symbol: str, days: int) -> List[List[float]]:
    coin_id = await get_price_feed_resolver().resolve(symbol)
    prices = await get_coingecko_provider().get_coin_market_chart(coin_id, days=days)
    if not prices:
        raise NotFoundError(f"No price data found for {symbol}")
    return prices


async def get_price_history(token_symbol: Optional[str], days: Any = None) -> ChartPayload:
    if not token_symbol:
        raise ValidationError("tokenSymbol is required")
    window = _days(days)
    points = await _market_chart(token_symbol, window)

    symbol = token_symbol.strip().upper()
    return ChartPayload(
        title=f"{symbol} price (USD), last {window}d",
        type="line",
        labels=[_label(ts, window) for ts, _ in points],
        values=[float(price) for _, price in points],
    )


async def get_token_comparison(
    token1: Optional[str],
    token2: Optional[str],
    days: Any = None,
) -> ChartPayload:
    if not token1 or not token2:
        raise ValidationError("token1 and token2 are required")
    window = _days(days)

    first, second = await asyncio.gather(
        _market_chart(token1, window),
        _market_chart(token2, window),
    )
    length = min(len(first), len(second))
    first, second = first[:length], second[:length]

    names = (token1.strip().upper(), token2.strip().upper())
    return ChartPayload(
        title=f"{names[0]} vs {names[1]} (% change), last {window}d",
        type="line",
        labels=[_label(ts, window) for ts, _ in first],
        series=[
            ChartSeries(
                name=name,
                data=normalize_prices([float(price) for _, price in points]),
                color=color,
            )
            for name, points, color in zip(names, (first, second), COMPARISON_COLORS)
        ],
    )
