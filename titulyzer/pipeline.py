"""End-to-end video pipeline: extract audio -> transcribe -> generate -> store."""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from titulyzer.audio.ffmpeg import extract_audio, probe_duration
from titulyzer.errors import TitulyzerError
from titulyzer.generation.generator import ContentGenerator
from titulyzer.generation.models import AnalysisResult
from titulyzer.storage import get_supabase_client, store_analysis
from titulyzer.transcription.orchestrator import ChunkedTranscriber

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def make_stored_filename(original_name: str) -> str:
    """Unique, filesystem-safe name for an upload, e.g. ``3f2a9c1b7d4e-my_video.mp4``."""
    base = Path(original_name).name or "video"
    safe = _UNSAFE_FILENAME_RE.sub("_", base).strip("._") or "video"
    return f"{uuid.uuid4().hex[:12]}-{safe}"


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of a successful pipeline run."""

    filename: str
    original_name: str
    transcription: str
    analysis: AnalysisResult
    duration: float | None
    file_size: int
    record: dict[str, Any]


class VideoPipeline:
    """Runs one uploaded video through the whole pipeline.

    Steps run strictly in sequence with no retries of their own; a failure in
    any step propagates to the caller. Temporary video and audio files are
    removed on every exit path.
    """

    def __init__(
        self,
        transcriber: ChunkedTranscriber,
        generator: ContentGenerator,
        tmp_dir: Path,
        sample_rate_hz: int = 16000,
        ffmpeg_binary: str = "ffmpeg",
        ffprobe_binary: str = "ffprobe",
    ) -> None:
        self.transcriber = transcriber
        self.generator = generator
        self.tmp_dir = Path(tmp_dir)
        self.sample_rate_hz = sample_rate_hz
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary

    async def process_upload(self, data: bytes, original_name: str) -> PipelineResult:
        """Process uploaded video bytes end to end.

        Args:
            data: Raw uploaded video.
            original_name: Filename supplied by the client.

        Returns:
            A :class:`PipelineResult` with the stored row.
        """
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        filename = make_stored_filename(original_name)
        video_path = self.tmp_dir / filename
        audio_path = self.tmp_dir / f"{Path(filename).stem}.wav"

        try:
            await asyncio.to_thread(video_path.write_bytes, data)
            logger.info("Processing %s (%.2f MB)", original_name, len(data) / (1024 * 1024))

            await extract_audio(
                video_path,
                audio_path,
                sample_rate_hz=self.sample_rate_hz,
                ffmpeg_binary=self.ffmpeg_binary,
            )
            duration = await self._probe_duration(audio_path)

            transcription = await self.transcriber.transcribe(audio_path)
            analysis = await self.generator.analyze(transcription, original_name)

            record = await asyncio.to_thread(
                store_analysis,
                get_supabase_client(),
                filename,
                original_name,
                analysis,
                transcription,
                duration,
                len(data),
            )
            logger.info("Stored analysis for %s (provider=%s)", filename, analysis.provider.value)

            return PipelineResult(
                filename=filename,
                original_name=original_name,
                transcription=transcription,
                analysis=analysis,
                duration=duration,
                file_size=len(data),
                record=record,
            )
        finally:
            _cleanup([video_path, audio_path])

    async def _probe_duration(self, audio_path: Path) -> float | None:
        try:
            return await probe_duration(audio_path, ffprobe_binary=self.ffprobe_binary)
        except TitulyzerError as exc:
            logger.warning("Could not probe duration of %s: %s", audio_path.name, exc)
            return None


def _cleanup(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to remove temporary file %s", path)
