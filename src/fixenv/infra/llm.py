from __future__ import annotations

from ..core.domain.exceptions import ConfigurationError
from ..core.ports import LoggerPort
from .llm_adapters import get_adapter


class LLM:
    def __init__(
        self,
        *,
        provider: str,
        model: str,
        api_key: str,
        logger: LoggerPort,
        base_url: str | None = None,
        temperature: float = 0.7,
    ) -> None:
        self._provider = provider
        self._model = model
        self._api_key = api_key
        self._base_url = base_url
        self._temperature = temperature
        self._logger = logger

    def complete(self, *, system: str, prompt: str, temperature: float | None = None) -> str:
        if not self._api_key:
            raise ConfigurationError("LLM API key not configured")

        self._logger.info(
            "llm_input",
            type="llm_input",
            provider=self._provider,
            model=self._model,
            prompt_len=len(prompt),
            prompt=prompt,
        )

        adapter = get_adapter(self._provider, self._model, self._api_key, self._base_url)
        resp = adapter.complete(
            system,
            prompt,
            temperature=self._temperature if temperature is None else temperature,
        )
        text = resp.text

        usage = resp.usage
        if usage is not None:
            self._logger.info(
                "llm_usage",
                type="llm_usage",
                provider=self._provider,
                model=self._model,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                total_tokens=usage.total_tokens,
            )

        self._logger.info(
            "llm_output",
            type="llm_output",
            provider=self._provider,
            model=self._model,
            raw_text_len=len(text),
            raw_text=text,
        )

        return text
