"""Pipeline configuration: provider enums and immutable service configs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from titulyzer.config import Settings


class Provider(str, Enum):
    """LLM providers, listed in fallback priority order."""

    GROQ = "groq"
    GEMINI = "gemini"
    OPENAI = "openai"


class ResponseStyle(str, Enum):
    """Shape of a provider's completion response."""

    OPENAI_CHAT = "openai_chat"  # choices[0].message.content
    GENERATIVE = "generative"  # candidates[0].content.parts[0].text


@dataclass(frozen=True)
class TranscriptionConfig:
    """Immutable tunables for the speech client and chunk orchestrator.

    Defaults mirror the Speech-to-Text limits the service was built around:
    requests above ~5 MiB of base64 audio or ~1 minute of speech are rejected,
    so larger inputs are cut into 45-second windows.
    """

    language_code: str = "pt-BR"
    sample_rate_hz: int = 16000
    chunk_seconds: int = 45
    direct_limit_bytes: int = 5 * 1024 * 1024
    force_chunking_phrases: tuple[str, ...] = ("too long", "limit")
    direct_timeout: float = 300.0
    chunk_timeout: float = 120.0

    @classmethod
    def from_settings(cls, settings: Settings) -> TranscriptionConfig:
        return cls(
            language_code=settings.speech_language_code,
            sample_rate_hz=settings.speech_sample_rate_hz,
            chunk_seconds=settings.chunk_duration_seconds,
            direct_limit_bytes=settings.direct_transcription_limit_bytes,
            force_chunking_phrases=tuple(settings.force_chunking_phrases),
            direct_timeout=settings.direct_timeout_seconds,
            chunk_timeout=settings.chunk_timeout_seconds,
        )


@dataclass(frozen=True)
class GeneratorConfig:
    """Immutable credentials and tunables for the content generator."""

    groq_api_key: str = field(default="", repr=False)
    gemini_api_key: str = field(default="", repr=False)
    openai_api_key: str = field(default="", repr=False)
    groq_models: tuple[str, ...] = (
        "llama-3.1-8b-instant",
        "llama-3.2-3b-preview",
        "mixtral-8x7b-32768",
    )
    gemini_model: str = "gemini-1.5-flash-latest"
    openai_model: str = "gpt-3.5-turbo"
    prompt_char_limit: int = 8000
    request_timeout: float = 30.0
    content_language: str = "Brazilian Portuguese"

    @classmethod
    def from_settings(cls, settings: Settings) -> GeneratorConfig:
        return cls(
            groq_api_key=settings.groq_api_key,
            gemini_api_key=settings.gemini_api_key,
            openai_api_key=settings.openai_api_key,
            groq_models=tuple(settings.groq_models),
            gemini_model=settings.gemini_model,
            openai_model=settings.openai_model,
            prompt_char_limit=settings.prompt_char_limit,
            request_timeout=settings.llm_timeout_seconds,
            content_language=settings.content_language,
        )

    @property
    def configured_providers(self) -> list[Provider]:
        """Providers with credentials, in fallback priority order."""
        keys = {
            Provider.GROQ: self.groq_api_key,
            Provider.GEMINI: self.gemini_api_key,
            Provider.OPENAI: self.openai_api_key,
        }
        return [p for p in Provider if keys[p].strip()]
