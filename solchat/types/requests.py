from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .events import WireModel


class HistoryPart(BaseModel):
    text: str = Field(default="", description="Plain text of the message")


class HistoryEntry(BaseModel):
    role: Literal["user", "model"] = Field(description="Message role: user or model")
    parts: List[HistoryPart] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts)


class PromptRequest(WireModel):
    prompt: Optional[str] = Field(default=None, description="New user message")
    history: List[HistoryEntry] = Field(default_factory=list, description="Prior conversation, oldest first")
    wallet_address: Optional[str] = Field(default=None, description="Connected wallet, trusted as given")
