"""Shared fixtures for the Titulyzer test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from titulyzer.api.dependencies import get_video_pipeline
from titulyzer.api.main import app


@pytest.fixture
def stored_row() -> dict[str, Any]:
    """A row as returned by the ``video_analyses`` table."""
    return {
        "id": "0b8f6c1e-3f0a-4f5e-9d4c-1c2b3a4d5e6f",
        "filename": "3f2a9c1b7d4e-interview.mp4",
        "original_name": "interview.mp4",
        "title": "Interview",
        "description": "A long interview",
        "summary": "An interview about machine learning",
        "tags": ["ml", "ai", "interview", "python", "data"],
        "ai_model": "groq",
        "transcription": "hello world",
        "duration": 12.5,
        "file_size": 2048,
        "created_at": "2026-01-01T10:00:00+00:00",
    }


@pytest.fixture
def fake_pipeline() -> Iterator[MagicMock]:
    """Replace the process-wide pipeline with a mock for the duration of a test."""
    pipeline = MagicMock()
    pipeline.process_upload = AsyncMock()
    app.dependency_overrides[get_video_pipeline] = lambda: pipeline
    yield pipeline
    app.dependency_overrides.pop(get_video_pipeline, None)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    path = tmp_path / "audio.wav"
    path.write_bytes(b"RIFF" + b"\x00" * 1020)
    return path
