"""LLM provider strategies with a uniform ``generate(prompt) -> str`` signature."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import google.generativeai as genai
from openai import AsyncOpenAI

from titulyzer.errors import ProviderError
from titulyzer.generation.prompts import SYSTEM_PROMPT, limit_prompt_size
from titulyzer.pipeline_config import GeneratorConfig, Provider, ResponseStyle

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"

MAX_OUTPUT_TOKENS = 1000
TEMPERATURE = 0.7


def extract_text(style: ResponseStyle, response: Any, provider: Provider) -> str:
    """Pull the completion text out of a provider response.

    Raises:
        ProviderError: the response does not have the expected shape or is empty.
    """
    try:
        if style is ResponseStyle.OPENAI_CHAT:
            text = response.choices[0].message.content
        else:
            text = response.candidates[0].content.parts[0].text
    except (AttributeError, IndexError, KeyError, TypeError) as exc:
        raise ProviderError(provider, f"unexpected response shape: {exc}") from exc

    if not isinstance(text, str) or not text.strip():
        raise ProviderError(provider, "empty completion")
    return text


class ContentProvider(Protocol):
    """One entry in the generator's fallback chain."""

    provider: Provider
    style: ResponseStyle

    async def generate(self, prompt: str) -> str: ...


class OpenAIChatProvider:
    """Chat-completions provider (OpenAI itself or an OpenAI-compatible API such as Groq).

    Models are tried in order. A failure on any model but the last is logged
    and the next model is attempted; a failure on the last model propagates.
    """

    style = ResponseStyle.OPENAI_CHAT

    def __init__(
        self,
        provider: Provider,
        client: AsyncOpenAI,
        models: tuple[str, ...],
        prompt_char_limit: int | None = None,
    ) -> None:
        if not models:
            raise ValueError("at least one model is required")
        self.provider = provider
        self.client = client
        self.models = models
        self.prompt_char_limit = prompt_char_limit

    async def generate(self, prompt: str) -> str:
        if self.prompt_char_limit is not None:
            prompt = limit_prompt_size(prompt, self.prompt_char_limit)

        last_index = len(self.models) - 1
        for i, model in enumerate(self.models):
            try:
                response = await self.client.chat.completions.create(
                    model=model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    max_tokens=MAX_OUTPUT_TOKENS,
                    temperature=TEMPERATURE,
                )
                return extract_text(self.style, response, self.provider)
            except Exception as exc:
                if i == last_index:
                    raise
                logger.warning(
                    "%s model %s failed (%s), trying %s",
                    self.provider.value,
                    model,
                    exc,
                    self.models[i + 1],
                )
        raise ProviderError(self.provider, "no models attempted")


class GeminiProvider:
    """Google Gemini ``generateContent`` provider."""

    provider = Provider.GEMINI
    style = ResponseStyle.GENERATIVE

    def __init__(self, model: Any, timeout: float = 30.0) -> None:
        self.model = model
        self.timeout = timeout

    async def generate(self, prompt: str) -> str:
        response = await self.model.generate_content_async(
            prompt,
            request_options={"timeout": self.timeout},
        )
        return extract_text(self.style, response, self.provider)


def build_providers(config: GeneratorConfig) -> list[ContentProvider]:
    """Instantiate a provider for every configured key, in fallback priority order.

    SDK-level retries are disabled; the generator's fallback chain is the
    only retry mechanism.
    """
    providers: list[ContentProvider] = []
    for provider in config.configured_providers:
        if provider is Provider.GROQ:
            client = AsyncOpenAI(
                api_key=config.groq_api_key,
                base_url=GROQ_BASE_URL,
                timeout=config.request_timeout,
                max_retries=0,
            )
            providers.append(
                OpenAIChatProvider(
                    Provider.GROQ,
                    client,
                    config.groq_models,
                    prompt_char_limit=config.prompt_char_limit,
                )
            )
        elif provider is Provider.GEMINI:
            genai.configure(api_key=config.gemini_api_key)  # type: ignore[attr-defined]
            model = genai.GenerativeModel(  # type: ignore[attr-defined]
                config.gemini_model,
                generation_config={
                    "temperature": TEMPERATURE,
                    "max_output_tokens": MAX_OUTPUT_TOKENS,
                },
            )
            providers.append(GeminiProvider(model, timeout=config.request_timeout))
        else:
            client = AsyncOpenAI(
                api_key=config.openai_api_key,
                timeout=config.request_timeout,
                max_retries=0,
            )
            providers.append(OpenAIChatProvider(Provider.OPENAI, client, (config.openai_model,)))
    return providers
