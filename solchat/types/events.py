from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# Tool actions (client-side signing directives)

class CreateAndSendArgs(WireModel):
    to_address: str = Field(description="Recipient address, already resolved from contacts")
    amount: float = Field(description="Human amount of the native asset")
    token_symbol: str = Field(description="Token symbol; currently always SOL")


class CreateAndSendAction(WireModel):
    action: Literal["createAndSendTransaction"] = "createAndSendTransaction"
    args: CreateAndSendArgs
    idempotency_key: Optional[str] = Field(default=None, description="Per-turn key used to dedupe signature prompts")


class SignAndSendAction(WireModel):
    action: Literal["signAndSendTransaction"] = "signAndSendTransaction"
    base64_tx: str = Field(description="Unsigned, base64-encoded transaction built by an upstream service")
    order_id: Optional[str] = Field(default=None, description="Trigger order the transaction belongs to")
    idempotency_key: Optional[str] = Field(default=None, description="Per-turn key used to dedupe signature prompts")


ToolAction = Annotated[
    Union[CreateAndSendAction, SignAndSendAction],
    Field(discriminator="action"),
]


# Chart data

class ChartSeries(WireModel):
    name: str
    data: List[float] = Field(default_factory=list)
    color: Optional[str] = None


class ChartPayload(WireModel):
    title: str
    type: Literal["line", "bar"] = "line"
    labels: List[str] = Field(default_factory=list)
    values: Optional[List[float]] = Field(default=None, description="Single series")
    series: Optional[List[ChartSeries]] = Field(default=None, description="Multiple series for comparison")


# Stream events

class TextEvent(WireModel):
    type: Literal["text"] = "text"
    content: str
    is_tool_response: Optional[bool] = None


class ToolCodeEvent(WireModel):
    type: Literal["tool_code"] = "tool_code"
    content: ToolAction


class ChartEvent(WireModel):
    type: Literal["chart"] = "chart"
    content: ChartPayload


class ErrorEvent(WireModel):
    type: Literal["error"] = "error"
    content: str


WireEvent = Annotated[
    Union[TextEvent, ToolCodeEvent, ChartEvent, ErrorEvent],
    Field(discriminator="type"),
]

WIRE_EVENT_ADAPTER: TypeAdapter = TypeAdapter(WireEvent)
