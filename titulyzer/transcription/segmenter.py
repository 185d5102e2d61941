"""Audio segmentation: plan fixed-length time windows and cut them with ffmpeg."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from pathlib import Path

from titulyzer.audio.ffmpeg import cut_segment, probe_duration
from titulyzer.errors import SegmentationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkWindow:
    """A ``[start, start + length)`` slice of an audio file, in seconds."""

    index: int
    start: float
    length: float

    @property
    def end(self) -> float:
        return self.start + self.length


def plan_chunks(duration_seconds: float, chunk_seconds: float) -> list[ChunkWindow]:
    """Tile ``[0, duration_seconds)`` with non-overlapping windows.

    Every window is *chunk_seconds* long except possibly the last one, which
    ends exactly at *duration_seconds*. The number of windows is
    ``ceil(duration_seconds / chunk_seconds)``.

    Args:
        duration_seconds: Total audio duration. Non-positive yields no windows.
        chunk_seconds: Nominal window length; must be positive.

    Returns:
        Ordered list of :class:`ChunkWindow`.
    """
    if chunk_seconds <= 0:
        raise ValueError("chunk_seconds must be positive")
    if duration_seconds <= 0:
        return []

    count = math.ceil(duration_seconds / chunk_seconds)
    windows: list[ChunkWindow] = []
    for i in range(count):
        start = i * chunk_seconds
        length = min(chunk_seconds, duration_seconds - start)
        windows.append(ChunkWindow(index=i, start=start, length=length))
    return windows


class AudioSegmenter:
    """Probes audio duration and materialises chunk windows as WAV files."""

    def __init__(
        self,
        tmp_dir: Path,
        sample_rate_hz: int = 16000,
        ffmpeg_binary: str = "ffmpeg",
        ffprobe_binary: str = "ffprobe",
    ) -> None:
        self.tmp_dir = Path(tmp_dir)
        self.sample_rate_hz = sample_rate_hz
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary

    async def probe(self, source: Path) -> float:
        return await probe_duration(source, ffprobe_binary=self.ffprobe_binary)

    async def materialize(self, source: Path, window: ChunkWindow) -> Path:
        """Cut *window* out of *source* into a new file under ``tmp_dir``.

        A partially written file is removed before the error propagates.

        Raises:
            SegmentationError: ffmpeg failed.
        """
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        destination = self.tmp_dir / f"chunk-{window.index}-{uuid.uuid4().hex}.wav"
        try:
            return await cut_segment(
                source,
                destination,
                window.start,
                window.length,
                sample_rate_hz=self.sample_rate_hz,
                ffmpeg_binary=self.ffmpeg_binary,
            )
        except SegmentationError:
            destination.unlink(missing_ok=True)
            raise
