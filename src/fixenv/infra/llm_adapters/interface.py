from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import LLMResponse


@runtime_checkable
class ChatCompletionAdapter(Protocol):
    """Minimal interface for a single system + user message exchange."""

    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 4096,
    ) -> LLMResponse:
        """Send one prompt and return normalized text + token usage."""
        raise NotImplementedError
