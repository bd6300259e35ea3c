"""
Prompt orchestration loop.

One LLM stream per prompt. Text deltas are forwarded as they arrive; every
function call in a chunk is dispatched in order, awaited, and rendered by its
tool family. Tool failures become an ``error`` event and the turn continues;
a failure of the model session ends the turn with one generic ``error``
event. The generator returns exactly once in every case.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncGenerator, Callable, List, Optional

import structlog

from ..config import settings
from ..providers.llm import get_llm_provider
from ..providers.llm.base import LLMMessage, LLMProvider, ToolCall
from ..types.events import ErrorEvent, TextEvent
from ..types.requests import HistoryEntry, PromptRequest
from .errors import SolchatError
from .tools import ToolContext, ToolFamily, ToolRegistry, get_tool_registry
from .wire import encode_event, error_event, events_for_result

_slog = structlog.stdlib.get_logger("orchestrator")

FALLBACK_TEXT = "I couldn't process that request. Try rephrasing."
MODEL_ERROR_TEXT = "Model provider error. Please try again."

# Families whose results ask the client to sign something
ACTION_FAMILIES = {
    ToolFamily.TRANSFER,
    ToolFamily.SWAP,
    ToolFamily.TRIGGER_CREATE,
    ToolFamily.TRIGGER_CANCEL,
}


class TurnState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    STREAMING_TEXT = "streaming_text"
    HANDLING_TOOL = "handling_tool"
    DONE = "done"
    ERROR = "error"


@dataclass
class Turn:
    turn_id: str
    wallet_address: str
    state: TurnState = TurnState.AWAITING_MODEL
    produced_output: bool = False
    events: int = 0
    actions: int = 0

    def next_idempotency_key(self) -> str:
        self.actions += 1
        return f"{self.turn_id}:{self.actions}"


def history_to_messages(history: List[HistoryEntry], prompt: str) -> List[LLMMessage]:
    messages = [
        LLMMessage(role="assistant" if entry.role == "model" else "user", content=entry.text)
        for entry in history
    ]
    messages.append(LLMMessage(role="user", content=prompt))
    return messages


def _tool_error_message(exc: Exception) -> str:
    if isinstance(exc, SolchatError):
        return exc.message or "Tool error"
    return str(exc) or "Tool error"


class PromptOrchestrator:
    """Drives one model turn per prompt and yields wire events."""

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        provider_factory: Optional[Callable[[], LLMProvider]] = None,
        *,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self.registry = registry or get_tool_registry()
        self.provider_factory = provider_factory or get_llm_provider
        self.system_prompt = system_prompt or settings.system_prompt
        self.max_tokens = max_tokens or settings.max_tokens
        self.temperature = settings.temperature if temperature is None else temperature

    async def stream(self, request: PromptRequest) -> AsyncGenerator[str, None]:
        """Encoded ``data: ...`` frames for a validated request."""
        async for event in self.run_turn(
            prompt=request.prompt or "",
            history=request.history,
            wallet_address=request.wallet_address or "",
        ):
            yield encode_event(event)

    async def run_turn(
        self,
        prompt: str,
        history: List[HistoryEntry],
        wallet_address: str,
    ) -> AsyncGenerator[Any, None]:
        turn = Turn(turn_id=uuid.uuid4().hex[:12], wallet_address=wallet_address)
        log = _slog.bind(turn_id=turn.turn_id)
        log.info("turn_started", history=len(history), wallet=wallet_address)

        try:
            try:
                provider = self.provider_factory()
                chunks = provider.stream_chat(
                    history_to_messages(history, prompt),
                    system_prompt=self.system_prompt,
                    tools=self.registry.get_definitions(),
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
                async for chunk in chunks:
                    turn.state = TurnState.STREAMING_TEXT

                    if chunk.text:
                        turn.produced_output = True
                        turn.events += 1
                        yield TextEvent(content=chunk.text)

                    for call in chunk.tool_calls:
                        turn.produced_output = True
                        turn.state = TurnState.HANDLING_TOOL
                        async for event in self._dispatch(call, turn, log):
                            turn.events += 1
                            yield event
                        turn.state = TurnState.STREAMING_TEXT
            except Exception as exc:
                turn.state = TurnState.ERROR
                log.error("llm_failed", error=str(exc), error_type=type(exc).__name__)
                turn.events += 1
                yield ErrorEvent(content=MODEL_ERROR_TEXT)
                return

            if not turn.produced_output:
                turn.events += 1
                yield TextEvent(content=FALLBACK_TEXT)
            turn.state = TurnState.DONE
        finally:
            log.info("turn_finished", state=turn.state.value, events=turn.events, actions=turn.actions)

    async def _dispatch(self, call: ToolCall, turn: Turn, log) -> AsyncGenerator[Any, None]:
        tool = self.registry.get_tool(call.name)
        if tool is None:
            log.warning("unknown_tool", tool=call.name)
            yield error_event(f"Unknown tool: {call.name}")
            return

        log.info("tool_call", tool=call.name, family=tool.family.value)
        context = ToolContext(wallet_address=turn.wallet_address, turn_id=turn.turn_id)
        try:
            result = await self.registry.execute(call, context)
            key = turn.next_idempotency_key() if tool.family in ACTION_FAMILIES else None
            events = events_for_result(tool.family, result, idempotency_key=key)
        except Exception as exc:
            log.warning(
                "tool_failed",
                tool=call.name,
                error=str(exc),
                category=getattr(getattr(exc, "category", None), "value", None),
            )
            events = [error_event(_tool_error_message(exc))]

        for event in events:
            yield event
