from .events import (
    ChartEvent,
    ChartPayload,
    ChartSeries,
    CreateAndSendAction,
    CreateAndSendArgs,
    ErrorEvent,
    SignAndSendAction,
    TextEvent,
    ToolAction,
    ToolCodeEvent,
    WIRE_EVENT_ADAPTER,
    WireEvent,
    WireModel,
)
from .requests import HistoryEntry, HistoryPart, PromptRequest

__all__ = [
    "ChartEvent",
    "ChartPayload",
    "ChartSeries",
    "CreateAndSendAction",
    "CreateAndSendArgs",
    "ErrorEvent",
    "SignAndSendAction",
    "TextEvent",
    "ToolAction",
    "ToolCodeEvent",
    "WIRE_EVENT_ADAPTER",
    "WireEvent",
    "WireModel",
    "HistoryEntry",
    "HistoryPart",
    "PromptRequest",
]
