from typing import Any, AsyncIterator, Dict, List, Optional

import anthropic
from anthropic import AsyncAnthropic

from .base import (
    LLMProvider, LLMMessage, LLMStreamChunk,
    LLMProviderError, LLMProviderAPIError, LLMProviderAuthError, LLMProviderRateLimitError,
    ToolDefinition, ToolCall,
)


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM Provider with streamed native tool calling"""

    def __init__(self, api_key: str, model: Optional[str] = None, **kwargs):
        if not model:
            raise ValueError("AnthropicProvider requires a model to be specified")

        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs) -> None:
        """Initialize the Anthropic client"""
        try:
            self.client = AsyncAnthropic(api_key=self.api_key, **kwargs)
        except Exception as e:
            self.logger.error(f"Failed to initialize Anthropic client: {e}")
            raise LLMProviderAuthError(f"Failed to initialize Anthropic client: {e}")

    @staticmethod
    def _convert_messages(messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert to Anthropic format.

        Anthropic requires the conversation to open with a user turn and to
        alternate roles, so empty messages are dropped and consecutive
        same-role messages are merged.
        """
        converted: List[Dict[str, Any]] = []
        for msg in messages:
            text = (msg.content or "").strip()
            if not text:
                continue
            role = "assistant" if msg.role in ("assistant", "model") else "user"
            if not converted and role != "user":
                continue
            if converted and converted[-1]["role"] == role:
                converted[-1]["content"] += f"\n\n{text}"
            else:
                converted.append({"role": role, "content": text})
        return converted

    async def stream_chat(
        self,
        messages: List[LLMMessage],
        *,
        system_prompt: Optional[str] = None,
        tools: Optional[List[ToolDefinition]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> AsyncIterator[LLMStreamChunk]:
        """Stream a Claude turn.

        Text deltas are yielded as they arrive; a tool call is yielded once its
        ``tool_use`` content block is complete (arguments fully parsed).
        """
        request_params: Dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "max_tokens": max_tokens or 1024,
        }
        if system_prompt:
            request_params["system"] = system_prompt
        if temperature is not None:
            request_params["temperature"] = temperature
        if tools:
            request_params["tools"] = [t.to_anthropic_format() for t in tools]

        try:
            async with self.client.messages.stream(**request_params) as stream:
                async for event in stream:
                    if event.type == "text":
                        if event.text:
                            yield LLMStreamChunk(text=event.text)
                    elif event.type == "content_block_stop":
                        block = event.content_block
                        if getattr(block, "type", None) == "tool_use":
                            yield LLMStreamChunk(tool_calls=[
                                ToolCall(
                                    id=block.id,
                                    name=block.name,
                                    arguments=dict(block.input or {}),
                                )
                            ])
        except anthropic.AuthenticationError as e:
            self.logger.error(f"Anthropic authentication failed: {e}")
            raise LLMProviderAuthError(f"Authentication failed: {e}") from e
        except anthropic.RateLimitError as e:
            self.logger.error(f"Anthropic rate limit exceeded: {e}")
            raise LLMProviderRateLimitError(f"Rate limit exceeded: {e}") from e
        except anthropic.APIError as e:
            self.logger.error(f"Anthropic API error: {e}")
            raise LLMProviderAPIError(f"API error: {e}") from e
        except LLMProviderError:
            raise
        except Exception as e:
            self.logger.error(f"Unexpected Anthropic streaming error: {e}")
            raise LLMProviderError(f"Unexpected error: {e}") from e
