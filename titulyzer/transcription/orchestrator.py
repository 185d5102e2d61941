"""Direct-vs-chunked transcription of an extracted audio file."""

from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path

from titulyzer.errors import AudioNotFoundError, ForceChunking
from titulyzer.pipeline_config import TranscriptionConfig
from titulyzer.transcription.segmenter import AudioSegmenter, plan_chunks
from titulyzer.transcription.speech_client import NO_SPEECH_TEXT, SpeechClient

logger = logging.getLogger(__name__)

CHUNK_SEPARATOR = "\n\n"


async def _read_base64(path: Path) -> str:
    raw = await asyncio.to_thread(path.read_bytes)
    return base64.b64encode(raw).decode("ascii")


class ChunkedTranscriber:
    """Transcribes an audio file, splitting it into windows when it is too large.

    Small files go to the speech API in one request. Files whose base64
    payload exceeds ``config.direct_limit_bytes`` -- or that the API rejects
    as too long -- are cut into ``config.chunk_seconds`` windows and
    transcribed one at a time. A failing window contributes nothing; the
    rest of the transcript is still returned.
    """

    def __init__(
        self,
        speech_client: SpeechClient,
        segmenter: AudioSegmenter,
        config: TranscriptionConfig,
    ) -> None:
        self.speech_client = speech_client
        self.segmenter = segmenter
        self.config = config

    async def transcribe(self, audio_path: Path) -> str:
        """Return the transcript of *audio_path*.

        Raises:
            AudioNotFoundError: *audio_path* does not exist.
            SegmentationError: the duration probe failed on the chunked path.
            httpx.HTTPError: the direct request failed for any reason other
                than a payload-too-large rejection.
        """
        audio_path = Path(audio_path)
        if not audio_path.exists():
            raise AudioNotFoundError(f"Audio file not found: {audio_path}")

        size_mb = audio_path.stat().st_size / (1024 * 1024)
        content_b64 = await _read_base64(audio_path)
        encoded_mb = len(content_b64) / (1024 * 1024)
        logger.info("Transcribing %s (%.2f MB, %.2f MB base64)", audio_path.name, size_mb, encoded_mb)

        if len(content_b64) > self.config.direct_limit_bytes:
            logger.info("Payload above %d bytes, splitting into chunks", self.config.direct_limit_bytes)
            del content_b64
            return await self._transcribe_chunked(audio_path)

        try:
            return await self.speech_client.recognize(content_b64, timeout=self.config.direct_timeout)
        except ForceChunking:
            logger.info("Speech API rejected the payload as too long, retrying with chunks")
        del content_b64
        return await self._transcribe_chunked(audio_path)

    async def _transcribe_chunked(self, audio_path: Path) -> str:
        duration = await self.segmenter.probe(audio_path)
        windows = plan_chunks(duration, self.config.chunk_seconds)
        logger.info(
            "%d chunks of %ss for %.1fs of audio", len(windows), self.config.chunk_seconds, duration
        )

        chunk_paths: list[Path] = []
        fragments: list[str] = []
        try:
            for window in windows:
                logger.info("Chunk %d/%d [%.1fs, %.1fs)", window.index + 1, len(windows), window.start, window.end)
                try:
                    chunk_path = await self.segmenter.materialize(audio_path, window)
                    chunk_paths.append(chunk_path)
                    text = await self.speech_client.recognize(
                        await _read_base64(chunk_path), timeout=self.config.chunk_timeout
                    )
                except Exception:
                    logger.exception("Chunk %d/%d failed, skipping", window.index + 1, len(windows))
                    continue

                if text.strip() and text != NO_SPEECH_TEXT:
                    fragments.append(text)
        finally:
            _remove_files(chunk_paths)

        logger.info("%d/%d chunks transcribed", len(fragments), len(windows))
        return CHUNK_SEPARATOR.join(fragments) or NO_SPEECH_TEXT


def _remove_files(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to remove chunk file %s", path)
