"""Helius-backed Solana balance provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..config import settings
from ..core.errors import ValidationError
from .base import HttpProvider
from .solana_rpc import LAMPORTS_PER_SOL


@dataclass
class TokenHolding:
    mint: str
    amount: Decimal          # Human units
    decimals: int
    symbol: Optional[str] = None


@dataclass
class WalletBalances:
    native_sol: Decimal
    tokens: List[TokenHolding] = field(default_factory=list)


class HeliusBalancesProvider(HttpProvider):
    """Fetch native and SPL balances via the Helius balances API."""

    name = "helius"
    timeout_s = 20

    def __init__(self) -> None:
        super().__init__()
        self.api_key = settings.solana_helius_api_key
        base_url = settings.solana_balances_base_url or "https://api.helius.xyz"
        self.base_url = base_url.rstrip("/")

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def get_balances(self, address: str) -> WalletBalances:
        if not await self.ready():
            raise ValidationError("Portfolio lookups need a Helius API key (SOLANA_HELIUS_API_KEY)")

        payload = await self._request_json(
            "GET",
            f"{self.base_url}/v0/addresses/{address}/balances",
            params={"api-key": self.api_key},
            headers={"accept": "application/json"},
            retry=True,
        )
        return self._parse(payload)

    @staticmethod
    def _parse(payload: Dict[str, Any]) -> WalletBalances:
        native = payload.get("nativeBalance") or 0
        if isinstance(native, dict):
            native = native.get("lamports") or 0
        native_sol = Decimal(str(native)) / Decimal(LAMPORTS_PER_SOL)

        holdings: List[TokenHolding] = []
        for item in payload.get("tokens") or []:
            if not isinstance(item, dict) or not item.get("mint"):
                continue
            try:
                decimals = int(item.get("decimals") or 0)
                raw_amount = Decimal(str(item.get("amount") or 0))
            except (ArithmeticError, TypeError, ValueError):
                continue
            holdings.append(
                TokenHolding(
                    mint=item["mint"],
                    amount=raw_amount / (Decimal(10) ** decimals),
                    decimals=decimals,
                    symbol=item.get("symbol"),
                )
            )

        return WalletBalances(native_sol=native_sol, tokens=holdings)


_helius: Optional[HeliusBalancesProvider] = None


def get_helius_provider() -> HeliusBalancesProvider:
    global _helius
    if _helius is None:
        _helius = HeliusBalancesProvider()
    return _helius
