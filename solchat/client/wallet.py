"""
Wallet-action executor.

Each ``tool_code`` action runs as its own background task through
Validate -> Preflight (native sends only) -> Build/Deserialize ->
RequestSignature -> Submit -> AwaitConfirmation -> Confirmed | Failed.
Progress is reported through ``on_status``; any failure is reported with a
``❌`` prefix and ends that action only.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Set, Union

from ..config import settings
from ..core.errors import ValidationError, WalletError
from ..providers.solana_rpc import SolanaRpcClient, SolanaTransactionStatus
from ..services.address import require_solana_address
from ..services.units import format_amount, from_base_units, to_base_units, to_decimal
from ..types.events import CreateAndSendAction, SignAndSendAction

logger = logging.getLogger(__name__)

SOL_DECIMALS = 9

# Flat fee reserved on top of the transfer amount during the balance preflight
TRANSFER_FEE_LAMPORTS = 5000

DUPLICATE_NOTICE = "🟢 Skipping duplicate transaction request."

Action = Union[CreateAndSendAction, SignAndSendAction]


@dataclass
class NativeTransfer:
    """Unsigned SOL transfer for the wallet to sign."""

    from_pubkey: str
    to_pubkey: str
    lamports: int
    recent_blockhash: str
    last_valid_block_height: int


@dataclass
class SerializedTransaction:
    """Server-built unsigned transaction bytes."""

    raw: bytes
    order_id: Optional[str] = None


UnsignedTransaction = Union[NativeTransfer, SerializedTransaction]


class WalletAdapter(Protocol):
    connected: bool
    public_key: Optional[str]

    async def send_transaction(self, transaction: UnsignedTransaction, rpc: SolanaRpcClient) -> str:
        """Sign and submit; returns the transaction signature."""
        ...


class ActionState(str, Enum):
    VALIDATE = "validate"
    PREFLIGHT = "preflight"
    BUILD = "build"
    REQUEST_SIGNATURE = "request_signature"
    SUBMIT = "submit"
    AWAIT_CONFIRMATION = "await_confirmation"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class ActionRun:
    action: Action
    label: str
    state: ActionState = ActionState.VALIDATE
    signature: Optional[str] = None


class ActionFailed(Exception):
    """Stops an action with a message that is shown as is."""


def describe_wallet_error(exc: BaseException) -> str:
    message = str(exc) or ""
    if "User rejected" in message:
        return "You cancelled the transaction in your wallet."
    if "reverted during simulation" in message:
        return "The wallet blocked this transaction because it is likely invalid for the Mainnet."
    return message or "An unexpected error occurred."


def action_label(action: Action) -> str:
    if isinstance(action, CreateAndSendAction):
        return "Transaction"
    if action.order_id:
        return "Trigger order"
    return "Swap"


class WalletActionExecutor:
    def __init__(
        self,
        wallet: WalletAdapter,
        rpc: SolanaRpcClient,
        on_status: Callable[[str], None],
        *,
        commitment: Optional[str] = None,
        confirmation_timeout_s: Optional[float] = None,
        explorer_url: Optional[str] = None,
    ):
        self.wallet = wallet
        self.rpc = rpc
        self.on_status = on_status
        self.commitment = commitment or settings.confirmation_commitment
        self.confirmation_timeout_s = (
            settings.confirmation_timeout_seconds if confirmation_timeout_s is None else confirmation_timeout_s
        )
        self.explorer_url = explorer_url or settings.explorer_tx_url
        self._seen_keys: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()

    def submit(self, action: Action) -> Optional[asyncio.Task]:
        """Start ``action`` in the background. Replayed idempotency keys are ignored."""
        key = action.idempotency_key
        if key:
            if key in self._seen_keys:
                logger.info("Ignoring duplicate wallet action %s", key)
                self.on_status(DUPLICATE_NOTICE)
                return None
            self._seen_keys.add(key)

        task = asyncio.create_task(self.execute(action))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight action."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def execute(self, action: Action) -> ActionRun:
        run = ActionRun(action=action, label=action_label(action))
        try:
            if not self.wallet.connected or not self.wallet.public_key:
                raise ActionFailed("❌ Wallet not connected or transaction sending is not available.")

            if isinstance(action, CreateAndSendAction):
                transaction = await self._build_transfer(run, action)
            else:
                transaction = self._deserialize(run, action)

            run.state = ActionState.REQUEST_SIGNATURE
            self.on_status(self._approval_prompt(action))
            signature = await self.wallet.send_transaction(transaction, self.rpc)
            if not signature:
                raise WalletError("The wallet did not return a signature.")

            run.state = ActionState.SUBMIT
            run.signature = signature
            self.on_status(
                f"🟢 {run.label} sent! Waiting for confirmation... \n\n"
                f"[View on Solscan]({self.explorer_url}{signature})"
            )

            run.state = ActionState.AWAIT_CONFIRMATION
            last_valid = transaction.last_valid_block_height if isinstance(transaction, NativeTransfer) else None
            result = await self.rpc.confirm_transaction(
                signature,
                commitment=self.commitment,
                last_valid_block_height=last_valid,
                timeout_s=self.confirmation_timeout_s,
            )
            if result.status is not SolanaTransactionStatus.CONFIRMED:
                raise ActionFailed(f"❌ {run.label} failed: {result.error or result.status.value}")

            run.state = ActionState.CONFIRMED
            self.on_status(f"✅ {run.label} Confirmed!")
            return run
        except ActionFailed as exc:
            self.on_status(str(exc))
        except Exception as exc:
            logger.warning("%s action failed in state %s: %s", run.label, run.state.value, exc)
            self.on_status(f"❌ {run.label} failed: {describe_wallet_error(exc)}")

        run.state = ActionState.FAILED
        return run

    async def _build_transfer(self, run: ActionRun, action: CreateAndSendAction) -> NativeTransfer:
        args = action.args
        if args.token_symbol.upper() != "SOL":
            raise ValidationError(f"Only SOL transfers can be built by the wallet, not {args.token_symbol}.")
        to_pubkey = require_solana_address(args.to_address, "recipient address")
        lamports = to_base_units(args.amount, SOL_DECIMALS)

        # Best effort: the network still validates the balance at submission
        run.state = ActionState.PREFLIGHT
        balance = await self.rpc.get_balance(self.wallet.public_key)
        required = lamports + TRANSFER_FEE_LAMPORTS
        if balance < required:
            raise ActionFailed(
                "❌ Transaction failed: Insufficient funds. "
                f"You need at least {format_amount(from_base_units(required, SOL_DECIMALS))} SOL, "
                f"but you only have {format_amount(from_base_units(balance, SOL_DECIMALS))} SOL."
            )

        run.state = ActionState.BUILD
        latest = await self.rpc.get_latest_blockhash("finalized")
        return NativeTransfer(
            from_pubkey=self.wallet.public_key,
            to_pubkey=to_pubkey,
            lamports=lamports,
            recent_blockhash=latest.blockhash,
            last_valid_block_height=latest.last_valid_block_height,
        )

    @staticmethod
    def _deserialize(run: ActionRun, action: SignAndSendAction) -> SerializedTransaction:
        run.state = ActionState.BUILD
        try:
            raw = base64.b64decode(action.base64_tx, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("The transaction payload is not valid base64.")
        if not raw:
            raise ValidationError("The transaction payload is empty.")
        return SerializedTransaction(raw=raw, order_id=action.order_id)

    @staticmethod
    def _approval_prompt(action: Action) -> str:
        if isinstance(action, CreateAndSendAction):
            return (
                "🟢 Action required: Please approve the transaction in your wallet "
                f"to send {format_amount(to_decimal(action.args.amount))} {action.args.token_symbol.upper()}."
            )
        noun = "trigger order" if action.order_id else "swap"
        return f"🟢 Action required: Please approve the {noun} transaction in your wallet."


__all__ = [
    "ActionRun",
    "ActionState",
    "NativeTransfer",
    "SerializedTransaction",
    "WalletAdapter",
    "WalletActionExecutor",
    "action_label",
    "describe_wallet_error",
]
