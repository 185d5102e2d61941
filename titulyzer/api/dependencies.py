"""Process-wide service wiring, built once from the application settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from titulyzer.config import settings
from titulyzer.generation.generator import ContentGenerator
from titulyzer.pipeline import VideoPipeline
from titulyzer.pipeline_config import GeneratorConfig, TranscriptionConfig
from titulyzer.transcription.orchestrator import ChunkedTranscriber
from titulyzer.transcription.segmenter import AudioSegmenter
from titulyzer.transcription.speech_client import SpeechClient


@lru_cache(maxsize=1)
def get_video_pipeline() -> VideoPipeline:
    """Return the shared pipeline, raising ConfigurationError if keys are missing."""
    transcription_config = TranscriptionConfig.from_settings(settings)
    tmp_dir = Path(settings.tmp_dir)

    transcriber = ChunkedTranscriber(
        SpeechClient(settings.google_speech_api_key, transcription_config),
        AudioSegmenter(
            tmp_dir,
            sample_rate_hz=settings.speech_sample_rate_hz,
            ffmpeg_binary=settings.ffmpeg_binary,
            ffprobe_binary=settings.ffprobe_binary,
        ),
        transcription_config,
    )
    generator = ContentGenerator(GeneratorConfig.from_settings(settings))

    return VideoPipeline(
        transcriber,
        generator,
        tmp_dir,
        sample_rate_hz=settings.speech_sample_rate_hz,
        ffmpeg_binary=settings.ffmpeg_binary,
        ffprobe_binary=settings.ffprobe_binary,
    )
