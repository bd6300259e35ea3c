from typing import Dict, Optional, Type

from .base import (
    LLMMessage,
    LLMProvider,
    LLMProviderError,
    LLMStreamChunk,
    ToolCall,
    ToolDefinition,
)
from .anthropic import AnthropicProvider

PROVIDER_ALIAS_MAP: Dict[str, str] = {
    "claude": "anthropic",
}

# Registry of available LLM providers
PROVIDER_REGISTRY: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
}


def canonical_provider_name(name: str) -> str:
    """Normalize provider aliases to their canonical identifier."""

    return PROVIDER_ALIAS_MAP.get(name.lower(), name.lower())


def get_llm_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    **kwargs,
) -> LLMProvider:
    """Instantiate an LLM provider according to configuration overrides."""

    from ...config import settings  # Local import to avoid circular dependency

    resolved_provider = canonical_provider_name(provider_name or settings.llm_provider)
    if resolved_provider not in PROVIDER_REGISTRY:
        available_providers = ", ".join(PROVIDER_REGISTRY.keys())
        raise ValueError(
            f"Unsupported provider '{resolved_provider}'. "
            f"Available providers: {available_providers}"
        )

    if resolved_provider == "anthropic":
        api_key = settings.anthropic_api_key
    else:
        api_key = None

    if not api_key:
        raise ValueError(f"No API key configured for provider: {resolved_provider}")

    resolved_model = (model or settings.llm_model or "").strip() or None
    provider_class = PROVIDER_REGISTRY[resolved_provider]
    return provider_class(api_key=api_key, model=resolved_model, **kwargs)


__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMStreamChunk",
    "LLMProviderError",
    "ToolCall",
    "ToolDefinition",
    "AnthropicProvider",
    "get_llm_provider",
    "PROVIDER_REGISTRY",
    "canonical_provider_name",
]
