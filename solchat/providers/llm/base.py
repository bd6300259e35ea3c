from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional
from enum import Enum
import logging

from pydantic import BaseModel, Field

from ...core.errors import TransportFatalError


# =============================================================================
# Tool Calling Models
# =============================================================================

class ToolParameterType(str, Enum):
    """Supported parameter types for tool definitions"""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class ToolParameter(BaseModel):
    """Definition of a single tool parameter"""
    name: str
    type: ToolParameterType
    description: str
    required: bool = True
    enum: Optional[List[str]] = None


class ToolDefinition(BaseModel):
    """Definition of a tool that can be called by the LLM"""
    name: str
    description: str
    parameters: List[ToolParameter] = Field(default_factory=list)

    def to_anthropic_format(self) -> Dict[str, Any]:
        """Convert to Anthropic's tool schema format"""
        properties = {}
        required = []

        for param in self.parameters:
            prop: Dict[str, Any] = {
                "type": param.type.value,
                "description": param.description,
            }
            if param.enum:
                prop["enum"] = param.enum

            properties[param.name] = prop

            if param.required:
                required.append(param.name)

        return {
            "name": self.name,
            "description": self.description,
            "input_schema": {
                "type": "object",
                "properties": properties,
                "required": required,
            }
        }


class ToolCall(BaseModel):
    """A tool call requested by the LLM"""
    id: str = ""
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Message Models
# =============================================================================

class LLMMessage(BaseModel):
    """Standardized message format for LLM communication"""
    role: str  # "user" or "assistant"
    content: str


class LLMStreamChunk(BaseModel):
    """One increment of a streamed model turn.

    A chunk may carry a text delta, function-call requests, both, or neither.
    """
    text: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    def __init__(self, api_key: str, model: str, **kwargs):
        self.api_key = api_key
        self.model = model
        self.logger = logging.getLogger(f"{self.__class__.__name__}")
        self._setup_client(**kwargs)

    @abstractmethod
    def _setup_client(self, **kwargs) -> None:
        """Initialize the provider-specific client"""
        pass

    @abstractmethod
    def stream_chat(
        self,
        messages: List[LLMMessage],
        *,
        system_prompt: Optional[str] = None,
        tools: Optional[List[ToolDefinition]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> AsyncIterator[LLMStreamChunk]:
        """Stream one model turn.

        Args:
            messages: Prior conversation followed by the new user prompt
            system_prompt: System instruction for the session
            tools: Tool manifest the model may call
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature

        Yields:
            LLMStreamChunk in arrival order.

        Raises:
            LLMProviderError: on any session or transport failure.
        """
        pass

    async def health_check(self) -> Dict[str, Any]:
        """Report configuration without spending tokens."""
        return {
            "status": "configured" if self.api_key else "unavailable",
            "provider": self.__class__.__name__,
            "model": self.model,
        }


class LLMProviderError(TransportFatalError):
    """Base exception for LLM provider errors"""
    pass


class LLMProviderRateLimitError(LLMProviderError):
    """Raised when hitting rate limits"""
    pass


class LLMProviderAuthError(LLMProviderError):
    """Raised when authentication fails"""
    pass


class LLMProviderAPIError(LLMProviderError):
    """Raised when API request fails"""
    pass
