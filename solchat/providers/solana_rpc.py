"""
Solana JSON-RPC client.

Reads balances and signatures for the server-side tools, and serves the
client-side wallet executor (blockhash, balance preflight, confirmation polling).
Never signs anything: transactions are signed by the user's wallet.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import settings
from ..core.errors import UpstreamRejectedError
from ..core.retry import RetryConfig
from .base import HttpProvider

LAMPORTS_PER_SOL = 1_000_000_000

# Ordering used when comparing a signature status against a target commitment.
_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class SolanaTransactionStatus(str, Enum):
    """Status of a Solana transaction."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    EXPIRED = "expired"


@dataclass
class SolanaTransactionResult:
    """Outcome of waiting on a submitted transaction."""
    signature: str
    status: SolanaTransactionStatus
    slot: Optional[int] = None
    error: Optional[str] = None


@dataclass
class LatestBlockhash:
    blockhash: str
    last_valid_block_height: int


@dataclass
class SignatureInfo:
    signature: str
    slot: Optional[int] = None
    block_time: Optional[int] = None
    err: Optional[Any] = None


class SolanaRpcClient(HttpProvider):
    """Minimal async JSON-RPC client for a Solana node."""

    name = "solana_rpc"
    timeout_s = 20

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        commitment: Optional[str] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        super().__init__(retry_config)
        self.rpc_url = rpc_url or settings.solana_rpc_url
        self.commitment = commitment or settings.solana_commitment

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make an RPC call and return its ``result`` member."""
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        data = await self._request_json(
            "POST",
            self.rpc_url,
            json=payload,
            headers={"Content-Type": "application/json"},
            retry=True,
            allow_error_payload=True,
        )

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise UpstreamRejectedError(f"RPC error: {message}", provider=self.name)

        return data.get("result") if isinstance(data, dict) else None

    async def get_balance(self, address: str) -> int:
        """Get SOL balance for an address, in lamports."""
        result = await self._rpc_call(
            "getBalance",
            [address, {"commitment": self.commitment}],
        )
        return int((result or {}).get("value", 0))

    async def get_signatures_for_address(self, address: str, limit: int = 5) -> List[SignatureInfo]:
        result = await self._rpc_call(
            "getSignaturesForAddress",
            [address, {"limit": limit, "commitment": self.commitment}],
        )
        return [
            SignatureInfo(
                signature=item.get("signature", ""),
                slot=item.get("slot"),
                block_time=item.get("blockTime"),
                err=item.get("err"),
            )
            for item in (result or [])
            if item.get("signature")
        ]

    async def get_latest_blockhash(self, commitment: str = "finalized") -> LatestBlockhash:
        """Get a recent blockhash for transaction building."""
        result = await self._rpc_call(
            "getLatestBlockhash",
            [{"commitment": commitment}],
        )
        value = (result or {}).get("value") or {}
        if not value.get("blockhash"):
            raise UpstreamRejectedError("RPC returned no blockhash", provider=self.name)
        return LatestBlockhash(
            blockhash=value["blockhash"],
            last_valid_block_height=int(value.get("lastValidBlockHeight") or 0),
        )

    async def get_block_height(self) -> int:
        result = await self._rpc_call("getBlockHeight", [{"commitment": self.commitment}])
        return int(result or 0)

    async def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        result = await self._rpc_call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        statuses = (result or {}).get("value") or [None]
        return statuses[0]

    async def confirm_transaction(
        self,
        signature: str,
        *,
        commitment: str = "processed",
        last_valid_block_height: Optional[int] = None,
        timeout_s: Optional[float] = None,
        poll_interval_s: float = 1.0,
    ) -> SolanaTransactionResult:
        """
        Poll until ``signature`` reaches ``commitment``.

        Gives up when the blockhash expires (block height passes
        ``last_valid_block_height``) or after ``timeout_s``.
        """
        timeout_s = timeout_s if timeout_s is not None else settings.confirmation_timeout_seconds
        target_rank = _COMMITMENT_RANK.get(commitment, 1)
        start_time = time.monotonic()
        interval = poll_interval_s

        while (time.monotonic() - start_time) < timeout_s:
            status = await self.get_signature_status(signature)

            if status is not None:
                if status.get("err") is not None:
                    return SolanaTransactionResult(
                        signature=signature,
                        status=SolanaTransactionStatus.FAILED,
                        slot=status.get("slot"),
                        error=str(status.get("err")),
                    )
                reached = _COMMITMENT_RANK.get(status.get("confirmationStatus") or "processed", 0)
                if reached >= target_rank:
                    return SolanaTransactionResult(
                        signature=signature,
                        status=SolanaTransactionStatus.CONFIRMED,
                        slot=status.get("slot"),
                    )
            elif last_valid_block_height is not None:
                if await self.get_block_height() > last_valid_block_height:
                    return SolanaTransactionResult(
                        signature=signature,
                        status=SolanaTransactionStatus.EXPIRED,
                        error="Blockhash expired before the transaction landed",
                    )

            await asyncio.sleep(interval)
            # Back off, max 5 seconds
            interval = min(interval * 1.5, 5.0)

        return SolanaTransactionResult(
            signature=signature,
            status=SolanaTransactionStatus.EXPIRED,
            error="Transaction confirmation timed out",
        )


# Singleton instance
_solana_rpc: Optional[SolanaRpcClient] = None


def get_solana_rpc() -> SolanaRpcClient:
    """Get the singleton Solana RPC client."""
    global _solana_rpc
    if _solana_rpc is None:
        _solana_rpc = SolanaRpcClient()
    return _solana_rpc


__all__ = [
    "LAMPORTS_PER_SOL",
    "LatestBlockhash",
    "SignatureInfo",
    "SolanaRpcClient",
    "SolanaTransactionResult",
    "SolanaTransactionStatus",
    "get_solana_rpc",
]
