"""Prompt round-trips against a running server."""

import logging
from typing import Optional

import httpx

from ..config import settings
from ..core.wire import FrameDecoder
from ..providers.solana_rpc import SolanaRpcClient, get_solana_rpc
from ..types.requests import PromptRequest
from .state import ChatState
from .stream import iter_events
from .wallet import WalletActionExecutor, WalletAdapter

logger = logging.getLogger(__name__)


class ChatSession:
    """
    One user's conversation.

    History lives only here and is rebuilt for every request; the server keeps
    no session memory.
    """

    def __init__(
        self,
        wallet: WalletAdapter,
        *,
        server_url: Optional[str] = None,
        rpc: Optional[SolanaRpcClient] = None,
        state: Optional[ChatState] = None,
        history_limit: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.wallet = wallet
        self.server_url = (server_url or settings.server_url).rstrip("/")
        self.state = state or ChatState()
        self.history_limit = settings.client_history_limit if history_limit is None else history_limit
        self.executor = WalletActionExecutor(wallet, rpc or get_solana_rpc(), self.state.add_status)
        self._transport = transport
        self.loading = False

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(settings.request_timeout_seconds, read=None)
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def send_prompt(self, text: str) -> bool:
        """
        Send ``text`` and reduce the streamed reply into ``state``.

        Returns False without doing anything for blank input or a disconnected
        wallet. Wallet actions keep running after this returns; await
        ``executor.drain()`` to wait for them.
        """
        prompt = (text or "").strip()
        if not prompt or not self.wallet.connected or not self.wallet.public_key:
            return False

        request = PromptRequest(
            prompt=prompt,
            history=self.state.build_history(self.history_limit),
            wallet_address=self.wallet.public_key,
        )
        self.state.add_user(prompt)
        self.state.start_turn()
        self.loading = True
        decoder = FrameDecoder()

        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    f"{self.server_url}/api/prompt",
                    json=request.to_wire(),
                ) as response:
                    if response.status_code != 200:
                        await response.aread()
                        raise httpx.HTTPStatusError(
                            f"Server responded with {response.status_code}: {response.reason_phrase}",
                            request=response.request,
                            response=response,
                        )
                    async for event in iter_events(response, decoder):
                        action = self.state.apply(event)
                        if action is not None:
                            self.executor.submit(action)
        except httpx.HTTPError as exc:
            logger.warning("Prompt request failed: %s", exc)
            self.state.add_status(f"API error: {exc}")
        finally:
            self.state.end_turn()
            self.loading = False
        return True
