"""Multi-provider content generation with ordered fallback."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from titulyzer.errors import AllProvidersFailedError, ConfigurationError, InvalidTranscriptError
from titulyzer.generation.models import AnalysisResult
from titulyzer.generation.parser import parse_ai_response
from titulyzer.generation.prompts import build_prompt
from titulyzer.generation.providers import ContentProvider, build_providers
from titulyzer.pipeline_config import GeneratorConfig

logger = logging.getLogger(__name__)


def describe_error(exc: BaseException) -> str:
    """Render an SDK exception with its HTTP status and body when it carries them."""
    status = getattr(exc, "status_code", None) or getattr(exc, "code", None)
    detail = getattr(exc, "body", None) or getattr(exc, "message", None)
    parts = [f"{type(exc).__name__}: {exc}"]
    if status is not None:
        parts.append(f"status={status}")
    if detail is not None and str(detail) != str(exc):
        parts.append(f"detail={detail}")
    return " ".join(parts)


class ContentGenerator:
    """Generates a title, description, summary and tags from a transcript.

    Providers are tried in the order given (Groq, Gemini, OpenAI when built
    from config). The first provider that returns usable text wins; errors
    from the others are logged and skipped.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        providers: Sequence[ContentProvider] | None = None,
    ) -> None:
        self.config = config
        self.providers = list(providers) if providers is not None else build_providers(config)
        if not self.providers:
            raise ConfigurationError(
                "No AI provider configured. Set at least one of "
                "GROQ_API_KEY, GEMINI_API_KEY or OPENAI_API_KEY."
            )
        logger.info(
            "AI providers configured: %s", ", ".join(p.provider.value for p in self.providers)
        )

    async def analyze(self, transcript: str, filename_hint: str | None = None) -> AnalysisResult:
        """Generate content for *transcript*, falling back across providers.

        Args:
            transcript: Full video transcript; must not be blank.
            filename_hint: Original upload filename, passed to the prompt as context.

        Raises:
            InvalidTranscriptError: *transcript* is blank (no provider is called).
            AllProvidersFailedError: every provider failed.
        """
        if not transcript or not transcript.strip():
            raise InvalidTranscriptError("Transcript is empty")

        prompt = build_prompt(transcript, filename_hint, language=self.config.content_language)

        last_error: Exception | None = None
        for strategy in self.providers:
            name = strategy.provider.value
            logger.info("Generating content with %s", name)
            try:
                raw = await strategy.generate(prompt)
            except Exception as exc:
                logger.error("%s failed: %s", name, describe_error(exc))
                last_error = exc
                continue

            parsed = parse_ai_response(raw)
            logger.info("Content generated by %s", name)
            return AnalysisResult.from_parsed(parsed, strategy.provider)

        raise AllProvidersFailedError(last_error)
