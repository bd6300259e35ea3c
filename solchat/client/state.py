"""
Chat state reducer.

Applies decoded wire events to an ordered list of messages. While a turn is
streaming, at most one model message is open for mutation: text events
concatenate into it only while it is still the last message. Once a status,
error or chart message lands after it, the next text opens a new message.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from ..types.events import ChartEvent, ChartPayload, ErrorEvent, TextEvent, ToolAction, ToolCodeEvent
from ..types.requests import HistoryEntry, HistoryPart

Role = Literal["user", "model"]


@dataclass
class ChatMessage:
    role: Role
    content: Union[str, ChartPayload]
    is_tool_response: bool = False

    @property
    def text(self) -> str:
        if isinstance(self.content, ChartPayload):
            return self.content.title
        return self.content


@dataclass
class ChatState:
    messages: List[ChatMessage] = field(default_factory=list)
    streaming: bool = False
    _open_index: Optional[int] = None

    @property
    def open_message(self) -> Optional[ChatMessage]:
        if self._open_index is None or self._open_index != len(self.messages) - 1:
            return None
        return self.messages[self._open_index]

    def add_user(self, text: str) -> ChatMessage:
        message = ChatMessage(role="user", content=text)
        self.messages.append(message)
        return message

    def add_status(self, text: str) -> ChatMessage:
        """Append a tool/status message; never part of the streaming text."""
        message = ChatMessage(role="model", content=text, is_tool_response=True)
        self.messages.append(message)
        return message

    def start_turn(self) -> None:
        self.streaming = True
        self._open_index = None

    def end_turn(self) -> None:
        self.streaming = False
        self._open_index = None

    def apply(self, event) -> Optional[ToolAction]:
        """Reduce one event. Returns the action for ``tool_code`` events."""
        if isinstance(event, TextEvent):
            self._append_text(event.content, bool(event.is_tool_response))
        elif isinstance(event, ErrorEvent):
            self.add_status(f"[Error]: {event.content}")
        elif isinstance(event, ChartEvent):
            self.messages.append(ChatMessage(role="model", content=event.content, is_tool_response=True))
        elif isinstance(event, ToolCodeEvent):
            return event.content
        return None

    def _append_text(self, text: str, is_tool_response: bool) -> None:
        message = self.open_message
        if message is None:
            message = ChatMessage(role="model", content="")
            self.messages.append(message)
            self._open_index = len(self.messages) - 1
        message.content = f"{message.content}{text}"
        if is_tool_response:
            message.is_tool_response = True

    def build_history(self, limit: Optional[int] = None) -> List[HistoryEntry]:
        """History for the next request, oldest first, trimmed to ``limit`` messages."""
        entries = [
            HistoryEntry(role=message.role, parts=[HistoryPart(text=message.text)])
            for message in self.messages
            if message.text
        ]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries
