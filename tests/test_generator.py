"""Tests for the provider strategies, prompt building and fallback generator.

SDK clients are replaced with AsyncMock objects returning response-shaped
namespaces; no network calls are made.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from titulyzer.errors import (
    AllProvidersFailedError,
    ConfigurationError,
    InvalidTranscriptError,
    ProviderError,
)
from titulyzer.generation.generator import ContentGenerator, describe_error
from titulyzer.generation.prompts import TRUNCATION_MARKER, build_prompt, limit_prompt_size
from titulyzer.generation.providers import (
    GeminiProvider,
    OpenAIChatProvider,
    build_providers,
    extract_text,
)
from titulyzer.pipeline_config import GeneratorConfig, Provider, ResponseStyle

GROQ_MODELS = ("llama-3.1-8b-instant", "llama-3.2-3b-preview", "mixtral-8x7b-32768")

GEMINI_PAYLOAD = {
    "title": "Gemini title",
    "description": "Gemini description",
    "summary": "A summary written by Gemini",
    "tags": ["g1", "g2", "g3", "g4", "g5"],
}


def chat_response(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def generative_response(text: str) -> SimpleNamespace:
    part = SimpleNamespace(text=text)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def chat_client(create: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = create
    return client


def gemini_model(generate: AsyncMock) -> MagicMock:
    model = MagicMock()
    model.generate_content_async = generate
    return model


class FakeProvider:
    style = ResponseStyle.OPENAI_CHAT

    def __init__(self, provider: Provider, result: str | Exception) -> None:
        self.provider = provider
        if isinstance(result, Exception):
            self.generate = AsyncMock(side_effect=result)
        else:
            self.generate = AsyncMock(return_value=result)


# ---------------------------------------------------------------------------
# Response shapes
# ---------------------------------------------------------------------------


class TestExtractText:
    def test_openai_chat_shape(self) -> None:
        assert extract_text(ResponseStyle.OPENAI_CHAT, chat_response("hi"), Provider.GROQ) == "hi"

    def test_generative_shape(self) -> None:
        response = generative_response("hello")
        assert extract_text(ResponseStyle.GENERATIVE, response, Provider.GEMINI) == "hello"

    def test_missing_choices(self) -> None:
        with pytest.raises(ProviderError) as exc_info:
            extract_text(ResponseStyle.OPENAI_CHAT, SimpleNamespace(choices=[]), Provider.OPENAI)
        assert exc_info.value.provider is Provider.OPENAI

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_completion(self, content: str | None) -> None:
        with pytest.raises(ProviderError, match="empty completion"):
            extract_text(ResponseStyle.OPENAI_CHAT, chat_response(content), Provider.GROQ)


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


class TestPrompt:
    def test_contains_transcript_and_language(self) -> None:
        prompt = build_prompt("olá mundo", language="European Portuguese")
        assert '"olá mundo"' in prompt
        assert "Write all content in European Portuguese" in prompt
        assert "Original file name" not in prompt

    def test_filename_hint(self) -> None:
        prompt = build_prompt("text", filename_hint="aula-01.mp4")
        assert "Original file name: aula-01.mp4" in prompt

    def test_json_braces_rendered(self) -> None:
        prompt = build_prompt("text")
        assert '"tags": ["keyword1"' in prompt

    def test_limit_keeps_short_prompt(self) -> None:
        assert limit_prompt_size("short", 100) == "short"

    def test_limit_truncates_long_prompt(self) -> None:
        limited = limit_prompt_size("x" * 9000, 8000)
        assert limited == "x" * 8000 + TRUNCATION_MARKER


# ---------------------------------------------------------------------------
# Provider strategies
# ---------------------------------------------------------------------------


class TestOpenAIChatProvider:
    @pytest.mark.asyncio
    async def test_request_parameters(self) -> None:
        create = AsyncMock(return_value=chat_response("{}"))
        provider = OpenAIChatProvider(Provider.OPENAI, chat_client(create), ("gpt-3.5-turbo",))

        assert await provider.generate("prompt") == "{}"

        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "gpt-3.5-turbo"
        assert kwargs["max_tokens"] == 1000
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"][0]["role"] == "system"
        assert kwargs["messages"][1] == {"role": "user", "content": "prompt"}

    @pytest.mark.asyncio
    async def test_models_tried_in_order(self) -> None:
        create = AsyncMock(side_effect=[RuntimeError("rate limited"), chat_response("ok")])
        provider = OpenAIChatProvider(Provider.GROQ, chat_client(create), GROQ_MODELS)

        assert await provider.generate("prompt") == "ok"
        assert [c.kwargs["model"] for c in create.await_args_list] == list(GROQ_MODELS[:2])

    @pytest.mark.asyncio
    async def test_empty_completion_moves_to_next_model(self) -> None:
        create = AsyncMock(side_effect=[chat_response(""), chat_response("second")])
        provider = OpenAIChatProvider(Provider.GROQ, chat_client(create), GROQ_MODELS)

        assert await provider.generate("prompt") == "second"

    @pytest.mark.asyncio
    async def test_last_model_failure_propagates(self) -> None:
        create = AsyncMock(side_effect=[RuntimeError("a"), RuntimeError("b"), RuntimeError("c")])
        provider = OpenAIChatProvider(Provider.GROQ, chat_client(create), GROQ_MODELS)

        with pytest.raises(RuntimeError, match="c"):
            await provider.generate("prompt")
        assert create.await_count == 3

    @pytest.mark.asyncio
    async def test_prompt_limit_applied(self) -> None:
        create = AsyncMock(return_value=chat_response("ok"))
        provider = OpenAIChatProvider(
            Provider.GROQ, chat_client(create), GROQ_MODELS, prompt_char_limit=50
        )

        await provider.generate("y" * 200)

        sent = create.await_args.kwargs["messages"][1]["content"]
        assert sent == "y" * 50 + TRUNCATION_MARKER

    def test_requires_a_model(self) -> None:
        with pytest.raises(ValueError):
            OpenAIChatProvider(Provider.OPENAI, MagicMock(), ())


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_generate(self) -> None:
        generate = AsyncMock(return_value=generative_response("gemini text"))
        provider = GeminiProvider(gemini_model(generate), timeout=12)

        assert await provider.generate("prompt") == "gemini text"
        generate.assert_awaited_once_with("prompt", request_options={"timeout": 12})

    @pytest.mark.asyncio
    async def test_blocked_response(self) -> None:
        generate = AsyncMock(return_value=SimpleNamespace(candidates=[]))
        provider = GeminiProvider(gemini_model(generate))

        with pytest.raises(ProviderError):
            await provider.generate("prompt")


class TestBuildProviders:
    def test_no_keys(self) -> None:
        assert build_providers(GeneratorConfig()) == []

    def test_priority_order(self) -> None:
        config = GeneratorConfig(groq_api_key="g", gemini_api_key="m", openai_api_key="o")
        with patch("titulyzer.generation.providers.genai") as mock_genai:
            providers = build_providers(config)

        assert [p.provider for p in providers] == [Provider.GROQ, Provider.GEMINI, Provider.OPENAI]
        mock_genai.configure.assert_called_once_with(api_key="m")
        assert mock_genai.GenerativeModel.call_args.args[0] == "gemini-1.5-flash-latest"

    def test_groq_uses_all_models_and_prompt_limit(self) -> None:
        (groq,) = build_providers(GeneratorConfig(groq_api_key="g", prompt_char_limit=123))
        assert isinstance(groq, OpenAIChatProvider)
        assert groq.models == GROQ_MODELS
        assert groq.prompt_char_limit == 123
        assert "api.groq.com" in str(groq.client.base_url)

    def test_openai_single_model(self) -> None:
        (openai,) = build_providers(GeneratorConfig(openai_api_key="o", openai_model="gpt-4o-mini"))
        assert isinstance(openai, OpenAIChatProvider)
        assert openai.models == ("gpt-4o-mini",)
        assert openai.prompt_char_limit is None


# ---------------------------------------------------------------------------
# ContentGenerator
# ---------------------------------------------------------------------------


class TestContentGenerator:
    @pytest.mark.asyncio
    async def test_falls_back_to_secondary_after_three_model_failures(self) -> None:
        create = AsyncMock(
            side_effect=[RuntimeError("429"), RuntimeError("503"), RuntimeError("timeout")]
        )
        groq = OpenAIChatProvider(Provider.GROQ, chat_client(create), GROQ_MODELS)
        generate = AsyncMock(return_value=generative_response(json.dumps(GEMINI_PAYLOAD)))
        gemini = GeminiProvider(gemini_model(generate))

        result = await ContentGenerator(GeneratorConfig(), [groq, gemini]).analyze("transcript")

        assert [c.kwargs["model"] for c in create.await_args_list] == list(GROQ_MODELS)
        assert result.provider is Provider.GEMINI
        assert result.title == "Gemini title"
        assert result.description == "Gemini description"
        assert result.summary == "A summary written by Gemini"
        assert result.tags == ("g1", "g2", "g3", "g4", "g5")

    @pytest.mark.asyncio
    async def test_first_success_stops_the_chain(self) -> None:
        first = FakeProvider(Provider.GROQ, json.dumps({"title": "Groq"}))
        second = FakeProvider(Provider.OPENAI, json.dumps({"title": "OpenAI"}))

        result = await ContentGenerator(GeneratorConfig(), [first, second]).analyze("text")

        assert result.provider is Provider.GROQ
        assert result.title == "Groq"
        second.generate.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("transcript", ["", "   ", "\n\t"])
    async def test_blank_transcript_rejected_before_any_call(self, transcript: str) -> None:
        provider = FakeProvider(Provider.GROQ, "{}")
        generator = ContentGenerator(GeneratorConfig(), [provider])

        with pytest.raises(InvalidTranscriptError):
            await generator.analyze(transcript)
        with pytest.raises(ValueError):
            await generator.analyze(transcript)
        provider.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_providers_fail(self) -> None:
        last = RuntimeError("openai down")
        providers = [
            FakeProvider(Provider.GROQ, RuntimeError("groq down")),
            FakeProvider(Provider.GEMINI, ProviderError(Provider.GEMINI, "empty completion")),
            FakeProvider(Provider.OPENAI, last),
        ]

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await ContentGenerator(GeneratorConfig(), providers).analyze("text")

        assert exc_info.value.last_error is last
        assert "openai down" in str(exc_info.value)
        assert all(p.generate.await_count == 1 for p in providers)

    @pytest.mark.asyncio
    async def test_prompt_includes_filename_hint(self) -> None:
        provider = FakeProvider(Provider.GROQ, "{}")
        await ContentGenerator(GeneratorConfig(), [provider]).analyze("text", "talk.mp4")

        prompt = provider.generate.await_args.args[0]
        assert "Original file name: talk.mp4" in prompt

    @pytest.mark.asyncio
    async def test_unstructured_output_still_yields_content(self) -> None:
        provider = FakeProvider(Provider.OPENAI, "Invalid JSON response")
        result = await ContentGenerator(GeneratorConfig(), [provider]).analyze("text")
        assert result.provider is Provider.OPENAI
        assert result.description == "Invalid JSON response"

    def test_no_providers_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            ContentGenerator(GeneratorConfig(), [])

    def test_no_keys_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
            ContentGenerator(GeneratorConfig())


class TestDescribeError:
    def test_plain_exception(self) -> None:
        assert describe_error(RuntimeError("boom")) == "RuntimeError: boom"

    def test_status_and_body(self) -> None:
        exc = RuntimeError("bad request")
        exc.status_code = 400  # type: ignore[attr-defined]
        exc.body = {"error": "model_decommissioned"}  # type: ignore[attr-defined]
        rendered = describe_error(exc)
        assert "status=400" in rendered
        assert "model_decommissioned" in rendered
