from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings

SUPPORTED_SPEECH_LANGUAGES = ("pt-BR", "en-US", "es-ES")


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys -- at least one LLM key is required at startup
    groq_api_key: str = ""
    gemini_api_key: str = ""
    openai_api_key: str = ""
    google_speech_api_key: str = ""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 3030
    log_level: str = "INFO"
    tmp_dir: str = "tmp"
    max_upload_bytes: int = 150 * 1024 * 1024

    # Transcription
    chunk_duration_seconds: int = 45
    direct_transcription_limit_bytes: int = 5 * 1024 * 1024
    force_chunking_phrases: list[str] = ["too long", "limit"]
    speech_language_code: str = "pt-BR"
    speech_sample_rate_hz: int = 16000
    direct_timeout_seconds: float = 300.0
    chunk_timeout_seconds: float = 120.0
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"

    # Content generation
    llm_timeout_seconds: float = 30.0
    prompt_char_limit: int = 8000
    content_language: str = "Brazilian Portuguese"
    groq_models: list[str] = [
        "llama-3.1-8b-instant",
        "llama-3.2-3b-preview",
        "mixtral-8x7b-32768",
    ]
    gemini_model: str = "gemini-1.5-flash-latest"
    openai_model: str = "gpt-3.5-turbo"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("speech_language_code")
    @classmethod
    def _check_language(cls, value: str) -> str:
        if value not in SUPPORTED_SPEECH_LANGUAGES:
            raise ValueError(
                f"Unsupported speech language {value!r}; "
                f"expected one of {', '.join(SUPPORTED_SPEECH_LANGUAGES)}"
            )
        return value

    @field_validator("speech_sample_rate_hz")
    @classmethod
    def _check_sample_rate(cls, value: int) -> int:
        if not 8000 <= value <= 48000:
            raise ValueError("Sample rate must be between 8000 and 48000 Hz")
        return value

    @field_validator("chunk_duration_seconds")
    @classmethod
    def _check_chunk_duration(cls, value: int) -> int:
        if not 10 <= value <= 120:
            raise ValueError("Chunk duration must be between 10 and 120 seconds")
        return value

    @field_validator("groq_models")
    @classmethod
    def _check_groq_models(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("groq_models must list at least one model")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except OSError:
        # .env unreadable -- build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
