from __future__ import annotations

import anthropic

from ...core.domain.exceptions import LLMRequestError
from .types import LLMResponse, TokenUsage


class AnthropicChatAdapter:
    """Anthropic Messages API adapter (Claude Sonnet, etc.).

    - The system prompt goes in the top-level ``system`` field
    - Only text blocks of the reply are joined
    """

    def __init__(self, model: str, api_key: str, base_url: str | None = None) -> None:
        self.model = model
        self._client = anthropic.Anthropic(api_key=api_key, base_url=base_url)

    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 4096,
    ) -> LLMResponse:
        try:
            message = self._client.messages.create(
                model=self.model,
                max_tokens=max_output_tokens,
                system=system,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            raise LLMRequestError.from_status(e.status_code) from e
        except anthropic.APIConnectionError as e:
            raise LLMRequestError(f"AI API unreachable: {e}") from e

        texts = [block.text for block in message.content if getattr(block, "type", None) == "text"]

        u = message.usage
        iu = u.input_tokens if u is not None else None
        ou = u.output_tokens if u is not None else None
        tt = (iu or 0) + (ou or 0) if (iu is not None or ou is not None) else None
        usage = TokenUsage(input_tokens=iu, output_tokens=ou, total_tokens=tt)
        return LLMResponse(text="".join(texts), usage=usage)
