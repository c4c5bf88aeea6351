from __future__ import annotations

import openai
from openai import OpenAI

from ...core.domain.exceptions import LLMRequestError
from .types import LLMResponse, TokenUsage


class OpenAIChatAdapter:
    """OpenAI Chat Completions adapter.

    - Works against any OpenAI-compatible gateway when base_url is given
    - Upstream HTTP errors surface as LLMRequestError with the upstream status
    """

    def __init__(self, model: str, api_key: str, base_url: str | None = None) -> None:
        self.model = model
        self._client = OpenAI(api_key=api_key, base_url=base_url)

    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 4096,
    ) -> LLMResponse:
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=max_output_tokens,
            )
        except openai.APIStatusError as e:
            raise LLMRequestError.from_status(e.status_code) from e
        except openai.APIConnectionError as e:
            raise LLMRequestError(f"AI API unreachable: {e}") from e

        text = ""
        if completion.choices:
            text = completion.choices[0].message.content or ""

        usage = None
        if completion.usage is not None:
            u = completion.usage
            usage = TokenUsage(
                input_tokens=u.prompt_tokens,
                output_tokens=u.completion_tokens,
                total_tokens=u.total_tokens,
            )
        return LLMResponse(text=text, usage=usage)
