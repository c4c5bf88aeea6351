from __future__ import annotations

from .anthropic_adapter import AnthropicChatAdapter
from .interface import ChatCompletionAdapter
from .openai_adapter import OpenAIChatAdapter


def get_adapter(
    provider: str,
    model: str,
    api_key: str,
    base_url: str | None = None,
) -> ChatCompletionAdapter:
    """Factory that returns an adapter for the requested provider/model."""
    if provider == "openai":
        return OpenAIChatAdapter(model, api_key, base_url)
    if provider == "anthropic":
        return AnthropicChatAdapter(model, api_key, base_url)
    raise ValueError("provider must be 'openai' or 'anthropic'")
