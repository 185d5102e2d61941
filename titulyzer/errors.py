"""Exception hierarchy for the transcription and content-generation pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from titulyzer.pipeline_config import Provider


class TitulyzerError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(TitulyzerError):
    """Raised at construction time when required credentials are missing."""


class InvalidTranscriptError(TitulyzerError, ValueError):
    """Raised when a transcript is blank and cannot be analysed."""


class AudioNotFoundError(TitulyzerError, FileNotFoundError):
    """Raised when the audio file to transcribe does not exist."""


class AudioExtractionError(TitulyzerError):
    """Raised when ffmpeg fails to extract the audio track from a video."""


class SegmentationError(TitulyzerError):
    """Raised when ffmpeg/ffprobe fails to probe or cut an audio file."""


class ForceChunking(TitulyzerError):
    """Internal signal: the speech API rejected a direct request as too large.

    Never escapes ChunkedTranscriber -- it switches to the chunked strategy.
    """


class ProviderError(TitulyzerError):
    """A single LLM provider call returned an unusable response."""

    def __init__(self, provider: Provider, detail: str) -> None:
        super().__init__(f"{provider.value}: {detail}")
        self.provider = provider
        self.detail = detail


class AllProvidersFailedError(TitulyzerError):
    """Every configured provider/model combination failed."""

    def __init__(self, last_error: BaseException | None = None) -> None:
        message = "All AI providers failed. Check the API keys and network connectivity."
        if last_error is not None:
            message = f"{message} Last error: {last_error}"
        super().__init__(message)
        self.last_error = last_error
