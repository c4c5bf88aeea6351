from types import SimpleNamespace

import pytest

from fixenv.infra.llm_adapters import (
    AnthropicChatAdapter,
    ChatCompletionAdapter,
    OpenAIChatAdapter,
    get_adapter,
)


def test_factory_returns_provider_adapters():
    openai_adapter = get_adapter("openai", "gpt-4o-mini", "sk-test", "https://gateway.example.com/v1")
    anthropic_adapter = get_adapter("anthropic", "claude-sonnet-4-5", "sk-ant-test")

    assert isinstance(openai_adapter, OpenAIChatAdapter)
    assert isinstance(anthropic_adapter, AnthropicChatAdapter)
    assert isinstance(openai_adapter, ChatCompletionAdapter)
    assert openai_adapter.model == "gpt-4o-mini"


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError):
        get_adapter("cohere", "m", "k")


def test_openai_adapter_sends_system_and_user_messages():
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"issues": []}'))],
            usage=SimpleNamespace(prompt_tokens=12, completion_tokens=5, total_tokens=17),
        )

    adapter = OpenAIChatAdapter("gpt-4o-mini", "sk-test")
    adapter._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))

    resp = adapter.complete("system text", "user text", temperature=0.7)

    assert resp.text == '{"issues": []}'
    assert resp.usage.total_tokens == 17
    assert calls[0]["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "user text"},
    ]
    assert calls[0]["temperature"] == 0.7


def test_anthropic_adapter_joins_text_blocks():
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text='{"issues": '),
                SimpleNamespace(type="thinking", thinking="..."),
                SimpleNamespace(type="text", text="[]}"),
            ],
            usage=SimpleNamespace(input_tokens=8, output_tokens=4),
        )

    adapter = AnthropicChatAdapter("claude-sonnet-4-5", "sk-ant-test")
    adapter._client = SimpleNamespace(messages=SimpleNamespace(create=create))

    resp = adapter.complete("system text", "user text")

    assert resp.text == '{"issues": []}'
    assert resp.usage.total_tokens == 12
    assert calls[0]["system"] == "system text"
    assert calls[0]["messages"] == [{"role": "user", "content": "user text"}]
