"""
Tests for stream framing and tool-result rendering.

Covers:
- Frame encoding (camelCase keys, escaped newlines, non-ASCII kept)
- Incremental decoding across arbitrary chunk boundaries
- Malformed frames skipped without losing neighbours
- Per-family event mapping
"""

import json

import pytest

from solchat.core.tools import ToolFamily
from solchat.core.wire import FrameDecoder, decode_frame, encode_event, error_event, events_for_result
from solchat.providers.jupiter import TriggerOrderTransaction
from solchat.tools.send import TransferInstruction
from solchat.types import (
    ChartEvent,
    ChartPayload,
    CreateAndSendAction,
    CreateAndSendArgs,
    ErrorEvent,
    SignAndSendAction,
    TextEvent,
    ToolCodeEvent,
)

BOB = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"


def _transfer_event() -> ToolCodeEvent:
    return ToolCodeEvent(content=CreateAndSendAction(
        args=CreateAndSendArgs(to_address=BOB, amount=0.5, token_symbol="SOL"),
        idempotency_key="abc:1",
    ))


# =============================================================================
# Encoding
# =============================================================================

def test_text_frame_uses_camel_case_and_escapes_newlines():
    frame = encode_event(TextEvent(content="line one\nline two", is_tool_response=True))

    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    assert frame.count("\n") == 2
    assert json.loads(frame[len("data: "):]) == {
        "type": "text",
        "content": "line one\nline two",
        "isToolResponse": True,
    }


def test_optional_fields_are_omitted():
    payload = json.loads(encode_event(TextEvent(content="hi"))[len("data: "):])

    assert payload == {"type": "text", "content": "hi"}


def test_non_ascii_is_kept_verbatim():
    frame = encode_event(TextEvent(content="✅ done"))

    assert "✅ done" in frame


def test_tool_code_frame_shape():
    payload = json.loads(encode_event(_transfer_event())[len("data: "):])

    assert payload == {
        "type": "tool_code",
        "content": {
            "action": "createAndSendTransaction",
            "args": {"toAddress": BOB, "amount": 0.5, "tokenSymbol": "SOL"},
            "idempotencyKey": "abc:1",
        },
    }


# =============================================================================
# Decoding
# =============================================================================

def test_decode_frame_round_trips_every_event_type():
    events = [
        TextEvent(content="hello"),
        _transfer_event(),
        ToolCodeEvent(content=SignAndSendAction(base64_tx="AQID", order_id="order-1")),
        ChartEvent(content=ChartPayload(title="SOL", labels=["a", "b"], values=[1.0, 2.0])),
        ErrorEvent(content="boom"),
    ]

    for event in events:
        assert decode_frame(encode_event(event)) == event


def test_decode_frame_ignores_comments():
    assert decode_frame(": keep-alive") is None


def test_decoder_handles_split_chunks():
    stream = encode_event(TextEvent(content="Hel")) + encode_event(TextEvent(content="lo"))
    decoder = FrameDecoder()

    events = []
    for index in range(0, len(stream), 7):
        events.extend(decoder.feed(stream[index:index + 7]))
    events.extend(decoder.flush())

    assert [event.content for event in events] == ["Hel", "lo"]
    assert decoder.malformed == 0


def test_decoder_skips_malformed_frames():
    stream = (
        encode_event(TextEvent(content="before"))
        + "data: {not json}\n\n"
        + 'data: {"type": "mystery", "content": 1}\n\n'
        + encode_event(ErrorEvent(content="after"))
    )
    decoder = FrameDecoder()

    events = decoder.feed(stream) + decoder.flush()

    assert events == [TextEvent(content="before"), ErrorEvent(content="after")]
    assert decoder.malformed == 2


def test_decoder_keeps_unicode_line_separators_inside_content():
    events = [
        TextEvent(content="Price\u2028moved"),
        TextEvent(content="A\x85B"),
        ErrorEvent(content="para\u2029break"),
        TextEvent(content="ok"),
    ]
    decoder = FrameDecoder()

    decoded = decoder.feed("".join(encode_event(event) for event in events)) + decoder.flush()

    assert decoded == events
    assert decoder.malformed == 0
    assert "".join(e.content for e in decoded if isinstance(e, TextEvent)) == "Price\u2028movedA\x85Bok"


def test_decoder_accepts_crlf_separators():
    decoder = FrameDecoder()

    events = decoder.feed('data: {"type": "text", "content": "x"}\r\n\r\n')

    assert events == [TextEvent(content="x")]


def test_flush_decodes_unterminated_tail():
    decoder = FrameDecoder()

    assert decoder.feed('data: {"type": "error", "content": "late"}') == []
    assert decoder.flush() == [ErrorEvent(content="late")]


# =============================================================================
# Result rendering
# =============================================================================

def test_text_family_marks_tool_response():
    assert events_for_result(ToolFamily.TEXT, "Your SOL balance is 1 SOL") == [
        TextEvent(content="Your SOL balance is 1 SOL", is_tool_response=True)
    ]


def test_transfer_to_raw_address_is_one_tool_code_event():
    result = TransferInstruction(to_address=BOB, amount=0.5, token_symbol="SOL")

    events = events_for_result(ToolFamily.TRANSFER, result, idempotency_key="t:1")

    assert events == [ToolCodeEvent(content=CreateAndSendAction(
        args=CreateAndSendArgs(to_address=BOB, amount=0.5, token_symbol="SOL"),
        idempotency_key="t:1",
    ))]


def test_transfer_to_contact_announces_resolution_first():
    result = TransferInstruction(to_address=BOB, amount=0.5, token_symbol="SOL", contact_name="bob")

    first, second = events_for_result(ToolFamily.TRANSFER, result)

    assert isinstance(first, TextEvent)
    assert first.is_tool_response is True
    assert "bob" in first.content and BOB in first.content
    assert isinstance(second, ToolCodeEvent)
    assert second.content.args.to_address == BOB


@pytest.mark.parametrize("amount,shown", [(2500000.5, "2500000.5"), (1.2345678, "1.2345678"), (3, "3")])
def test_contact_announcement_shows_exact_amount(amount, shown):
    result = TransferInstruction(to_address=BOB, amount=amount, token_symbol="SOL", contact_name="bob")

    announcement, _ = events_for_result(ToolFamily.TRANSFER, result)

    assert announcement.content.endswith(f"Preparing to send {shown} SOL.")


def test_trigger_create_emits_action_then_confirmation():
    order = TriggerOrderTransaction(transaction="AQID", request_id="req-1", order_id="ord-9")

    action, text = events_for_result(ToolFamily.TRIGGER_CREATE, order, idempotency_key="t:2")

    assert action.content == SignAndSendAction(base64_tx="AQID", order_id="ord-9", idempotency_key="t:2")
    assert text.content == "✅ Trigger order created: Order ID ord-9"


def test_trigger_cancel_emits_action_then_prompt():
    order = TriggerOrderTransaction(transaction="AQID", order_id="ord-9")

    action, text = events_for_result(ToolFamily.TRIGGER_CANCEL, order)

    assert action.content.order_id == "ord-9"
    assert text.content.startswith("🛑 Cancellation ready for Order ID ord-9")


def test_chart_family_wraps_payload():
    chart = ChartPayload(title="SOL price", labels=["x"], values=[1.0])

    assert events_for_result(ToolFamily.CHART, chart) == [ChartEvent(content=chart)]


def test_error_event_defaults_message():
    assert error_event("") == ErrorEvent(content="Tool error")
    assert error_event("Unknown tool: x") == ErrorEvent(content="Unknown tool: x")


def test_unhandled_family_raises():
    with pytest.raises(ValueError):
        events_for_result("nonsense", "x")
