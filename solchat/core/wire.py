"""
Wire framing for the prompt stream.

Each event is one ``data: <JSON>\\n\\n`` frame. JSON escapes newlines, so the
blank line only ever appears as a separator and one bad frame cannot bleed into
the next.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..providers.jupiter import TriggerOrderTransaction
from ..tools.send import TransferInstruction
from ..services.units import format_amount, to_decimal
from ..tools.swap import SwapTransaction
from ..types.events import (
    ChartEvent,
    ChartPayload,
    CreateAndSendAction,
    CreateAndSendArgs,
    ErrorEvent,
    SignAndSendAction,
    TextEvent,
    ToolCodeEvent,
    WIRE_EVENT_ADAPTER,
    WireEvent,
)
from .tools import ToolFamily

logger = logging.getLogger(__name__)

FRAME_PREFIX = "data:"
FRAME_SEPARATOR = "\n\n"


def encode_event(event: Any) -> str:
    return f"data: {json.dumps(event.to_wire(), ensure_ascii=False)}{FRAME_SEPARATOR}"


def decode_frame(frame: str) -> Optional[WireEvent]:
    """Parse one frame; ``None`` for keep-alives and comments."""
    payload_lines = []
    # only "\n" separates lines; U+2028 and friends can sit raw inside the JSON
    for line in frame.split("\n"):
        if line.startswith(FRAME_PREFIX):
            payload_lines.append(line[len(FRAME_PREFIX):].lstrip(" "))
    if not payload_lines:
        return None
    return WIRE_EVENT_ADAPTER.validate_json("\n".join(payload_lines))


class FrameDecoder:
    """
    Incremental decoder: feed raw text as it arrives, get complete events back.

    Partial frames are buffered across chunks. A frame that fails to parse is
    logged and skipped.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self.malformed = 0

    def feed(self, chunk: str) -> List[WireEvent]:
        self._buffer += chunk.replace("\r\n", "\n")
        *frames, self._buffer = self._buffer.split(FRAME_SEPARATOR)
        return self._decode_all(frames)

    def flush(self) -> List[WireEvent]:
        """Decode whatever remains once the stream has ended."""
        remainder, self._buffer = self._buffer, ""
        return self._decode_all([remainder])

    def _decode_all(self, frames: List[str]) -> List[WireEvent]:
        events: List[WireEvent] = []
        for frame in frames:
            if not frame.strip():
                continue
            try:
                event = decode_frame(frame)
            except (PydanticValidationError, ValueError) as exc:
                self.malformed += 1
                logger.warning("Skipping malformed stream frame %r: %s", frame[:200], exc)
                continue
            if event is not None:
                events.append(event)
        return events


def events_for_result(
    family: ToolFamily,
    result: Any,
    *,
    idempotency_key: Optional[str] = None,
) -> List[Any]:
    """Map a tool outcome onto the event(s) its family emits."""
    if family is ToolFamily.TEXT:
        return [TextEvent(content=str(result), is_tool_response=True)]

    if family is ToolFamily.TRANSFER:
        transfer: TransferInstruction = result
        events: List[Any] = []
        if transfer.contact_name:
            events.append(TextEvent(
                content=(
                    f"📇 Found contact {transfer.contact_name} ({transfer.to_address}). "
                    f"Preparing to send {format_amount(to_decimal(transfer.amount))} {transfer.token_symbol}."
                ),
                is_tool_response=True,
            ))
        events.append(ToolCodeEvent(content=CreateAndSendAction(
            args=CreateAndSendArgs(
                to_address=transfer.to_address,
                amount=transfer.amount,
                token_symbol=transfer.token_symbol,
            ),
            idempotency_key=idempotency_key,
        )))
        return events

    if family is ToolFamily.SWAP:
        swap: SwapTransaction = result
        return [ToolCodeEvent(content=SignAndSendAction(
            base64_tx=swap.base64_tx,
            idempotency_key=idempotency_key,
        ))]

    if family is ToolFamily.TRIGGER_CREATE:
        order: TriggerOrderTransaction = result
        return [
            ToolCodeEvent(content=SignAndSendAction(
                base64_tx=order.transaction,
                order_id=order.order_id,
                idempotency_key=idempotency_key,
            )),
            TextEvent(content=f"✅ Trigger order created: Order ID {order.order_id}", is_tool_response=True),
        ]

    if family is ToolFamily.TRIGGER_CANCEL:
        order = result
        return [
            ToolCodeEvent(content=SignAndSendAction(
                base64_tx=order.transaction,
                order_id=order.order_id,
                idempotency_key=idempotency_key,
            )),
            TextEvent(
                content=f"🛑 Cancellation ready for Order ID {order.order_id}. Approve it in your wallet.",
                is_tool_response=True,
            ),
        ]

    if family is ToolFamily.CHART:
        chart: ChartPayload = result
        return [ChartEvent(content=chart)]

    raise ValueError(f"Unhandled tool family: {family}")


def error_event(message: str) -> ErrorEvent:
    return ErrorEvent(content=message or "Tool error")
