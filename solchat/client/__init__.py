from .session import ChatSession
from .state import ChatMessage, ChatState
from .stream import iter_events
from .wallet import (
    ActionState,
    NativeTransfer,
    SerializedTransaction,
    WalletActionExecutor,
    WalletAdapter,
)

__all__ = [
    "ChatSession",
    "ChatMessage",
    "ChatState",
    "iter_events",
    "ActionState",
    "NativeTransfer",
    "SerializedTransaction",
    "WalletActionExecutor",
    "WalletAdapter",
]
