"""Async wrappers around the ffmpeg and ffprobe binaries."""

from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path

from titulyzer.errors import AudioExtractionError, SegmentationError

logger = logging.getLogger(__name__)

# Mono 16-bit PCM -- the LINEAR16 encoding the speech API expects
PCM_ARGS = ["-acodec", "pcm_s16le", "-ac", "1"]


async def _run(cmd: list[str]) -> tuple[int, str, str]:
    """Run *cmd* without blocking the event loop; return (returncode, stdout, stderr)."""
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    return (
        proc.returncode if proc.returncode is not None else -1,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )


def _tail(stderr: str, lines: int = 5) -> str:
    return "\n".join(stderr.strip().splitlines()[-lines:]) or "unknown error"


async def extract_audio(
    video_path: Path,
    audio_path: Path,
    sample_rate_hz: int = 16000,
    ffmpeg_binary: str = "ffmpeg",
) -> Path:
    """Extract the audio track of *video_path* as a mono 16-bit PCM WAV file.

    Raises:
        AudioExtractionError: ffmpeg is missing or exits non-zero.
    """
    cmd = [
        ffmpeg_binary,
        "-y",
        "-i",
        str(video_path),
        "-vn",
        *PCM_ARGS,
        "-ar",
        str(sample_rate_hz),
        str(audio_path),
    ]
    try:
        returncode, _, stderr = await _run(cmd)
    except FileNotFoundError as exc:
        raise AudioExtractionError(f"ffmpeg binary not found: {ffmpeg_binary}") from exc

    if returncode != 0:
        raise AudioExtractionError(f"ffmpeg failed for {video_path.name}: {_tail(stderr)}")

    logger.info("Audio extracted to %s", audio_path)
    return audio_path


async def probe_duration(path: Path, ffprobe_binary: str = "ffprobe") -> float:
    """Return the duration of *path* in seconds.

    Raises:
        SegmentationError: ffprobe is missing, fails, or reports no usable duration.
    """
    cmd = [
        ffprobe_binary,
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        str(path),
    ]
    try:
        returncode, stdout, stderr = await _run(cmd)
    except FileNotFoundError as exc:
        raise SegmentationError(f"ffprobe binary not found: {ffprobe_binary}") from exc

    if returncode != 0:
        raise SegmentationError(f"ffprobe failed for {path.name}: {_tail(stderr)}")
    try:
        duration = float(stdout.strip())
    except ValueError as exc:
        raise SegmentationError(f"Invalid duration from ffprobe for {path.name}") from exc
    if not math.isfinite(duration) or duration <= 0:
        raise SegmentationError(f"Non-positive duration for {path.name}")
    return duration


async def cut_segment(
    source: Path,
    destination: Path,
    start: float,
    length: float,
    sample_rate_hz: int = 16000,
    ffmpeg_binary: str = "ffmpeg",
) -> Path:
    """Write ``[start, start + length)`` of *source* to *destination* as mono PCM WAV.

    Raises:
        SegmentationError: ffmpeg is missing or exits non-zero.
    """
    cmd = [
        ffmpeg_binary,
        "-y",
        "-ss",
        f"{start:.3f}",
        "-t",
        f"{length:.3f}",
        "-i",
        str(source),
        *PCM_ARGS,
        "-ar",
        str(sample_rate_hz),
        str(destination),
    ]
    try:
        returncode, _, stderr = await _run(cmd)
    except FileNotFoundError as exc:
        raise SegmentationError(f"ffmpeg binary not found: {ffmpeg_binary}") from exc

    if returncode != 0:
        raise SegmentationError(
            f"ffmpeg failed cutting {source.name} at {start:.1f}s: {_tail(stderr)}"
        )
    return destination
